"""
Follower-count enrichment client.

Asks the external profile-data service for an account's follower count and
avatar. The service answers ``{"success": bool, "followerCount": int,
"avatarUrl": str | null}``; anything else is treated as unavailable.
"""
from __future__ import annotations

import logging
from typing import Protocol

import httpx

from config.settings import settings
from src.em_common.errors import CollaboratorUnavailableError
from src.em_listing.domain.models import ProfileSnapshot, normalize_username

logger = logging.getLogger(__name__)

COLLABORATOR_NAME = "enrichment"
PROFILE_PATH = "/profiles/fetch"


class EnrichmentClientProtocol(Protocol):
    async def fetch_profile(self, username: str) -> ProfileSnapshot: ...


class EnrichmentClient:
    """Thin async wrapper; a shared httpx.AsyncClient may be injected."""

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._base_url = (base_url or settings.ENRICHMENT_BASE_URL).rstrip("/")
        self._timeout = timeout if timeout is not None else settings.ENRICHMENT_TIMEOUT_SECONDS
        self._client = client

    async def fetch_profile(self, username: str) -> ProfileSnapshot:
        handle = normalize_username(username)
        url = f"{self._base_url}{PROFILE_PATH}"
        try:
            if self._client is not None:
                resp = await self._client.post(url, json={"username": handle})
            else:
                async with httpx.AsyncClient(timeout=self._timeout) as client:
                    resp = await client.post(url, json={"username": handle})
            resp.raise_for_status()
            payload = resp.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("Enrichment fetch failed for @%s: %s", handle, e)
            raise CollaboratorUnavailableError(COLLABORATOR_NAME, str(e)) from e

        if not isinstance(payload, dict) or not payload.get("success", False):
            detail = payload.get("error", "no data") if isinstance(payload, dict) else "bad payload"
            raise CollaboratorUnavailableError(COLLABORATOR_NAME, str(detail))

        try:
            follower_count = max(int(payload.get("followerCount") or 0), 0)
        except (TypeError, ValueError) as e:
            raise CollaboratorUnavailableError(COLLABORATOR_NAME, "bad followerCount") from e

        logger.info("Fetched @%s: %d followers", handle, follower_count)
        return ProfileSnapshot(
            follower_count=follower_count,
            avatar_url=payload.get("avatarUrl") or None,
        )
