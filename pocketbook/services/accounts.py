"""
Local Account Registry

A small credential store kept in the same key/value backend as the
user data, under the "users" key. It exists to give each person their
own storage scope - it is not a security boundary.

Failures (wrong password, taken email, mismatched confirmation) raise
and leave the stored registry untouched.
"""

from typing import TYPE_CHECKING, Optional

import bcrypt
import structlog
from pydantic import TypeAdapter, ValidationError

from pocketbook.models.account import UserAccount
from pocketbook.models.audit import AuditEventBuilder
from pocketbook.services.storage.interface import KeyValueBackend, StorageError
from pocketbook.session import Session

if TYPE_CHECKING:
    from pocketbook.audit import AuditLogger


USERS_KEY = "users"

# bcrypt ignores everything past 72 bytes
MAX_PASSWORD_BYTES = 72

_accounts_adapter = TypeAdapter(list[UserAccount])
logger = structlog.get_logger(__name__)


class AccountError(Exception):
    """Base exception for account operations."""
    pass


class InvalidCredentialsError(AccountError):
    """Email/password combination does not match any account."""
    pass


class DuplicateAccountError(AccountError):
    """An account with this email already exists."""
    pass


class PasswordMismatchError(AccountError):
    """Password and confirmation differ."""
    pass


class InvalidPasswordError(AccountError):
    """Password is empty or too long to hash."""
    pass


def _normalize_email(email: str) -> str:
    return email.strip().lower()


class AccountService:
    """Sign-up, log-in and guest sessions."""

    def __init__(
        self,
        backend: KeyValueBackend,
        audit_logger: Optional["AuditLogger"] = None,
        bcrypt_rounds: int = 12,
    ):
        self._backend = backend
        self._audit_logger = audit_logger
        self._rounds = bcrypt_rounds

    def _load_accounts(self) -> list[UserAccount]:
        raw = self._backend.get_item(USERS_KEY)
        if raw is None:
            return []
        try:
            return _accounts_adapter.validate_json(raw)
        except ValidationError as e:
            raise StorageError("Stored accounts are unreadable") from e

    def _save_accounts(self, accounts: list[UserAccount]) -> None:
        self._backend.set_item(USERS_KEY, _accounts_adapter.dump_json(accounts).decode("utf-8"))

    def find_by_email(self, email: str) -> Optional[UserAccount]:
        wanted = _normalize_email(email)
        for account in self._load_accounts():
            if account.email == wanted:
                return account
        return None

    def sign_up(self, email: str, password: str, confirm_password: str) -> Session:
        """
        Create an account and return a session for it.

        Raises:
            PasswordMismatchError: If the confirmation differs
            InvalidPasswordError: If the password is empty or too long
            DuplicateAccountError: If the email is already registered
        """
        email = _normalize_email(email)
        try:
            if password != confirm_password:
                raise PasswordMismatchError("Passwords do not match")
            encoded = password.encode("utf-8")
            if not encoded:
                raise InvalidPasswordError("Password cannot be empty")
            if len(encoded) > MAX_PASSWORD_BYTES:
                raise InvalidPasswordError(
                    f"Password cannot be longer than {MAX_PASSWORD_BYTES} bytes"
                )

            accounts = self._load_accounts()
            if any(account.email == email for account in accounts):
                raise DuplicateAccountError("Email already exists")
        except AccountError as e:
            self._audit(AuditEventBuilder.signup_failed(email, str(e)))
            raise

        password_hash = bcrypt.hashpw(encoded, bcrypt.gensalt(rounds=self._rounds)).decode("utf-8")
        account = UserAccount(email=email, password_hash=password_hash)
        self._save_accounts(accounts + [account])

        self._audit(AuditEventBuilder.account_created(account.id, account.email))
        return Session(user_id=account.id, email=account.email)

    def log_in(self, email: str, password: str) -> Session:
        """
        Check credentials and return a session for the account.

        Raises:
            InvalidCredentialsError: If no account matches
        """
        account = self.find_by_email(email)
        encoded = password.encode("utf-8")
        if (
            account is None
            or len(encoded) > MAX_PASSWORD_BYTES
            or not bcrypt.checkpw(encoded, account.password_hash.encode("utf-8"))
        ):
            self._audit(AuditEventBuilder.login_failed(_normalize_email(email)))
            raise InvalidCredentialsError("Invalid email or password")

        self._audit(AuditEventBuilder.login_succeeded(account.id, account.email))
        return Session(user_id=account.id, email=account.email)

    def guest(self) -> Session:
        """Start a guest session (data kept under the *_guest keys)."""
        self._audit(AuditEventBuilder.guest_session_started())
        return Session.guest()

    def _audit(self, event) -> None:
        if self._audit_logger:
            self._audit_logger.log(event)
        else:
            logger.info("account_event", event_type=event.event_type.value)
