"""Listing endpoints: public marketplace plus seller management."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.em_common.database import get_db_session
from src.em_common.response import ApiResponse, success_response
from src.em_gateway.auth.dependencies import get_current_principal
from src.em_listing.application.schemas import (
    CreateListingRequest,
    MarketplaceListing,
    MarketplacePage,
    OwnerListing,
    PublishRequest,
    UpdateListingRequest,
)
from src.em_listing.application.service import ListingService
from src.em_policy.domain.principal import Principal

router = APIRouter(prefix="/listings", tags=["listings"])
_service = ListingService()

PrincipalDep = Annotated[Principal, Depends(get_current_principal)]
SessionDep = Annotated[AsyncSession, Depends(get_db_session)]


def _respond(request: Request, data: object, message: str = "success") -> ApiResponse:
    resp = success_response(data, message)
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.get("", response_model=ApiResponse, summary="Published marketplace listings")
async def list_marketplace(
    request: Request,
    db: SessionDep,
    limit: int = Query(20, ge=1, le=100),
    cursor: str | None = Query(None, description="Pagination cursor (listing ID)"),
) -> ApiResponse:
    rows, next_cursor, has_more = await _service.list_published(db, cursor, limit)
    page = MarketplacePage(
        items=[MarketplaceListing.from_listing(r) for r in rows],
        next_cursor=next_cursor,
        has_more=has_more,
    )
    return _respond(request, page.model_dump(mode="json"))


@router.get("/mine", response_model=ApiResponse, summary="Caller's own listings")
async def list_mine(request: Request, principal: PrincipalDep, db: SessionDep) -> ApiResponse:
    rows = await _service.list_mine(db, principal)
    return _respond(request, [OwnerListing.from_listing(r).model_dump(mode="json") for r in rows])


@router.get("/{listing_id}", response_model=ApiResponse)
async def get_listing(request: Request, listing_id: str, db: SessionDep) -> ApiResponse:
    listing = await _service.get_published(db, listing_id)
    return _respond(request, MarketplaceListing.from_listing(listing).model_dump(mode="json"))


@router.post("", response_model=ApiResponse, status_code=status.HTTP_201_CREATED)
async def create_listing(
    request: Request,
    body: CreateListingRequest,
    principal: PrincipalDep,
    db: SessionDep,
) -> ApiResponse:
    listing = await _service.create_listing(
        db,
        principal,
        username=body.username,
        pricing_strategy=body.pricing_strategy,
        fixed_price=body.fixed_price,
        percentage_rate=body.percentage_rate,
        contact_phone=body.contact_phone,
        contact_email=str(body.contact_email) if body.contact_email else None,
        payment_details=body.payment_details,
        is_published=body.is_published,
    )
    return _respond(request, OwnerListing.from_listing(listing).model_dump(mode="json"))


@router.patch("/{listing_id}", response_model=ApiResponse)
async def update_listing(
    request: Request,
    listing_id: str,
    body: UpdateListingRequest,
    principal: PrincipalDep,
    db: SessionDep,
) -> ApiResponse:
    changes = body.model_dump(exclude_unset=True)
    if changes.get("contact_email") is not None:
        changes["contact_email"] = str(changes["contact_email"])
    listing = await _service.update_listing(db, principal, listing_id, changes)
    return _respond(request, OwnerListing.from_listing(listing).model_dump(mode="json"))


@router.post("/{listing_id}/publish", response_model=ApiResponse)
async def set_published(
    request: Request,
    listing_id: str,
    body: PublishRequest,
    principal: PrincipalDep,
    db: SessionDep,
) -> ApiResponse:
    listing = await _service.set_published(db, principal, listing_id, body.is_published)
    return _respond(request, OwnerListing.from_listing(listing).model_dump(mode="json"))


@router.post("/{listing_id}/sync", response_model=ApiResponse)
async def sync_listing(
    request: Request, listing_id: str, principal: PrincipalDep, db: SessionDep
) -> ApiResponse:
    listing = await _service.sync_listing(db, principal, listing_id)
    return _respond(request, OwnerListing.from_listing(listing).model_dump(mode="json"))


@router.delete("/{listing_id}", response_model=ApiResponse)
async def delete_listing(
    request: Request, listing_id: str, principal: PrincipalDep, db: SessionDep
) -> ApiResponse:
    await _service.delete_listing(db, principal, listing_id)
    return _respond(request, {"listing_id": listing_id}, "Listing deleted")
