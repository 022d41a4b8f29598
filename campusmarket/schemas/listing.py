from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator


def _to_text(value: Any) -> Any:
    if value is None or isinstance(value, str):
        return value
    if isinstance(value, bool):
        return 'true' if value else 'false'
    return str(value)


class ListingDraft(BaseModel):
    model_config = ConfigDict(extra='allow')

    title: str | None = None
    description: str | None = None
    price: int | float | str | None = None
    seller_name: str | None = None
    seller_phone: str | None = None

    @field_validator('title', 'description', 'seller_name', 'seller_phone', mode='before')
    @classmethod
    def _coerce_text(cls, value: Any) -> Any:
        return _to_text(value)

    @field_validator('price', mode='before')
    @classmethod
    def _coerce_price(cls, value: Any) -> Any:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return value
        return _to_text(value)


class ValidationResult(BaseModel):
    valid: bool
    value: str | None = None
    error: str | None = None

    @classmethod
    def ok(cls, value: str | None = None) -> 'ValidationResult':
        return cls(valid=True, value=value)

    @classmethod
    def fail(cls, error: str) -> 'ValidationResult':
        return cls(valid=False, error=error)


class RateLimitStatus(BaseModel):
    allowed: bool
    minutes_remaining: int | None = None
    error: str | None = None


class ListingValidationOutcome(BaseModel):
    valid: bool
    errors: list[str]
    sanitized_data: ListingDraft
    flagged_for_review: bool = False

    def sanitized_dict(self) -> dict[str, Any]:
        return self.sanitized_data.model_dump()
