"""
Userbase Backend — Pydantic Request/Response Schemas
======================================================

What:  Pydantic models defining the JSON contract of the users API.
Why:   Input validation, camelCase serialization, and OpenAPI doc generation.
How:   FastAPI validates request bodies against these models and serializes
       responses by alias (firstName, lastName).
Who:   Returned by UserService and used by the users routes.

Why schemas are separate from the SQLAlchemy model:
    UserService converts rows to UserSchema inside the unit of work, so no
    ORM object ever leaves an open session.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base for API models: camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# ══════════════════════════════════════════════════════════════════════════
# User Models
# ══════════════════════════════════════════════════════════════════════════


class UserSchema(CamelModel):
    """
    What:  Full representation of a user.
    Who:   Returned by every users endpoint; accepted by POST /api/users.

    Example:
        {"id": "1", "firstName": "Ann", "lastName": "Lee", "email": "ann@example.com"}
    """
    id: str = Field(min_length=1, max_length=64, description="Caller-assigned identifier")
    first_name: Optional[str] = Field(default=None, max_length=255, description="Given name")
    last_name: Optional[str] = Field(default=None, max_length=255, description="Family name")
    email: Optional[str] = Field(default=None, max_length=255, description="Email address")


class UserUpdate(CamelModel):
    """
    What:  Body of PUT /api/users/{id}.
    Why:   The id comes from the path. A body id is tolerated only when it
           matches the path (checked in the route, 400 otherwise).
    """
    id: Optional[str] = Field(default=None, max_length=64, description="Must equal the path id if given")
    first_name: Optional[str] = Field(default=None, max_length=255)
    last_name: Optional[str] = Field(default=None, max_length=255)
    email: Optional[str] = Field(default=None, max_length=255)

    def to_user(self, user_id: str) -> UserSchema:
        return UserSchema(
            id=user_id,
            first_name=self.first_name,
            last_name=self.last_name,
            email=self.email,
        )


# ══════════════════════════════════════════════════════════════════════════
# Error / Health Models
# ══════════════════════════════════════════════════════════════════════════


class ErrorResponse(BaseModel):
    """
    What:  Standardized error body for all API errors.

    Fields:
        error: Machine-readable error code (e.g., "not_found", "conflict")
        message: Human-readable description
        details: Optional extra context (e.g., which field failed validation)
        request_id: Correlation ID for tracing this error in server logs
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """Returned by GET /health for container and load balancer probes."""
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    profile: str = Field(description="Active configuration profile")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
