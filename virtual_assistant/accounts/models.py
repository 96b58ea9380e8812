"""
Account and assistant profile models.
"""

import uuid
from datetime import datetime, timezone

from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UserAccount(BaseModel):
    """A stored user account, including credentials."""

    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    name: str
    email: str
    password_hash: str
    assistant_name: str = "Assistant"
    assistant_image: str = ""
    history: list[str] = Field(default_factory=list)  # Most recent last
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)

    def to_profile(self) -> "Profile":
        """Public view of the account (never includes the password hash)."""
        return Profile(
            id=self.id,
            name=self.name,
            email=self.email,
            assistantName=self.assistant_name,
            assistantImage=self.assistant_image,
            history=list(self.history),
            createdAt=self.created_at,
            updatedAt=self.updated_at,
        )


class Profile(BaseModel):
    """Profile as returned to clients (camelCase wire names)."""

    id: str
    name: str
    email: str
    assistantName: str
    assistantImage: str = ""
    history: list[str] = Field(default_factory=list)
    createdAt: datetime | None = None
    updatedAt: datetime | None = None
