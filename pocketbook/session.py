"""
User Session

DESIGN DECISION: The current user is an explicit value.
It is resolved once (at sign-in or when choosing guest mode) and handed
to every store and flow that needs it. Nothing reads "who is logged in"
from storage behind the caller's back.

Storage keys are derived from the session:
    transactions_<account-id>   or   transactions_guest
"""

from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from pocketbook.models.finance import DataKind


GUEST_SCOPE = "guest"


class Session(BaseModel):
    """Who the current data belongs to."""
    model_config = ConfigDict(frozen=True)

    user_id: Optional[UUID] = None
    email: Optional[str] = None

    @classmethod
    def guest(cls) -> "Session":
        return cls()

    @property
    def is_guest(self) -> bool:
        return self.user_id is None

    @property
    def scope(self) -> str:
        """Suffix shared by every storage key of this session."""
        return GUEST_SCOPE if self.is_guest else str(self.user_id)

    def storage_key(self, kind: DataKind) -> str:
        return f"{DataKind(kind).value}_{self.scope}"

    def state_key(self, name: str) -> str:
        """Key for UI state that must not outlive this session."""
        return f"{name}_{self.scope}"
