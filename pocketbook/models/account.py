"""
Account Models

A toy local credential store: one entry per email address,
passwords kept only as bcrypt hashes.
"""

from datetime import datetime
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field


class UserAccount(BaseModel):
    """A registered local account."""
    model_config = ConfigDict(str_strip_whitespace=True)

    id: UUID = Field(
        default_factory=uuid4,
        description="Stable identifier used to scope stored data"
    )
    email: str = Field(
        ...,
        min_length=3,
        max_length=254,
        pattern=r"^[^@\s]+@[^@\s]+$",
    )
    password_hash: str = Field(
        ...,
        min_length=1,
        description="bcrypt hash of the password"
    )
    created_at: datetime = Field(default_factory=datetime.utcnow)
