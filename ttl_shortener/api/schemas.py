"""
API Request and Response Schemas

This module defines all Pydantic models for API requests and responses.
JSON field names are camelCase on the wire; Python attributes are snake_case.

Design Principles:
- Request models reject wrong types instead of coercing them: a string
  "24" or a boolean is not a valid expireInHours
- Range checks live in the service layer, next to the rest of validation
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ShortenRequest(BaseModel):
    """Request model for URL shortening endpoint."""
    model_config = ConfigDict(populate_by_name=True)

    original_url: str = Field(
        ...,
        alias="originalUrl",
        strict=True,
        description="The long URL to shorten"
    )
    expire_in_hours: float = Field(
        ...,
        alias="expireInHours",
        strict=True,
        allow_inf_nan=False,
        description="Hours until the short URL expires; zero or negative expires immediately"
    )

    @field_validator("original_url")
    @classmethod
    def original_url_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("originalUrl must not be blank")
        return value


class ShortenResponse(BaseModel):
    """Response model for URL shortening endpoint."""
    model_config = ConfigDict(populate_by_name=True)

    short_url: str = Field(..., alias="shortUrl", description="The complete short URL")
    expires_at: datetime = Field(..., alias="expiresAt", description="Expiration instant (UTC)")


class HealthResponse(BaseModel):
    """Response model for the health endpoint."""
    status: str
    database: bool
