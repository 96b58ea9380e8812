"""
Pydantic schemas for API requests and responses.
"""

from pydantic import BaseModel, Field


# === General ===


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = "ok"
    version: str
    classifier_backend: str
    classifier_loaded: bool
    accounts: int


class MessageResponse(BaseModel):
    """Plain message response."""

    message: str


# === Auth ===


class SignUpRequest(BaseModel):
    """Account registration."""

    name: str = Field(..., min_length=1, max_length=100)
    email: str = Field(..., min_length=3, max_length=254, pattern=r"^[^@\s]+@[^@\s]+$")
    password: str = Field(..., max_length=256)


class SignInRequest(BaseModel):
    """Account sign-in."""

    email: str = Field(..., min_length=1, max_length=254)
    password: str = Field(..., min_length=1, max_length=256)


# === Assistant ===


class UpdateAssistantRequest(BaseModel):
    """Assistant customization (JSON variant)."""

    assistantName: str | None = Field(default=None, max_length=50)
    assistantImage: str | None = Field(default=None, max_length=2048)


class AskRequest(BaseModel):
    """Command sent to the assistant."""

    command: str | None = Field(default=None, max_length=2000)


class AskResponse(BaseModel):
    """Routed assistant reply."""

    type: str
    userInput: str
    response: str
