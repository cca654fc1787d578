"""Pydantic schemas for em_pricing API."""

from pydantic import BaseModel, EmailStr, Field, model_validator

from config.settings import settings
from src.em_pricing.domain.models import PaymentInstructions


class UpdatePlatformSettingsRequest(BaseModel):
    """Only the provided keys are written; omitted keys keep their value."""

    fps_number: str | None = Field(None, max_length=64)
    payment_email: EmailStr | None = None
    payment_methods: str | None = Field(None, max_length=2000)

    @model_validator(mode="after")
    def at_least_one(self) -> "UpdatePlatformSettingsRequest":
        if not self.model_fields_set:
            raise ValueError("at least one setting must be provided")
        return self


class PaymentInstructionsResponse(BaseModel):
    fps_number: str
    payment_email: str
    payment_methods: str

    @classmethod
    def with_defaults(cls, instructions: PaymentInstructions) -> "PaymentInstructionsResponse":
        """Fill unset fields from configuration; the resolver itself never invents values."""
        return cls(
            fps_number=instructions.fps_number or settings.DEFAULT_FPS_NUMBER,
            payment_email=instructions.payment_email or settings.DEFAULT_PAYMENT_EMAIL,
            payment_methods=instructions.payment_methods or settings.DEFAULT_PAYMENT_METHODS,
        )


class PlatformSettingOut(BaseModel):
    key: str
    value: str | None
    version: int
    updated_by: str | None
    updated_at: str | None
