"""Credential store: users keyed by id and email, plus refresh-token state."""

import logging

from sqlalchemy import Update, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from authsvc.models import User

logger = logging.getLogger(__name__)

# Unique index on users.email (see the create_users_table migration).
EMAIL_UNIQUE_INDEX = "ix_users_email"


class CredentialStoreError(Exception):
    """Raised when the underlying database fails. Wraps the SQLAlchemy error."""

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        self.message = message
        self.cause = cause
        super().__init__(message)


class DuplicateEmailError(CredentialStoreError):
    """Raised when an insert hits the unique email index."""


def _is_duplicate_email(e: IntegrityError) -> bool:
    """True only for a unique violation on the email column, not NOT NULL or other constraints."""
    diag = getattr(e.orig, "diag", None)
    constraint = getattr(diag, "constraint_name", None)
    if constraint is not None:
        return constraint == EMAIL_UNIQUE_INDEX
    message = str(e.orig)
    return EMAIL_UNIQUE_INDEX in message or ("UNIQUE" in message and "users.email" in message)


class CredentialStore:
    """
    Repository over the users table.

    Every write commits immediately; a failed write is rolled back and re-raised as
    CredentialStoreError so callers never see raw SQLAlchemy exceptions.
    """

    def __init__(self, session: Session) -> None:
        self.session = session

    def _fail(self, action: str, e: SQLAlchemyError) -> CredentialStoreError:
        self.session.rollback()
        logger.warning("Credential store %s failed: %s", action, type(e).__name__)
        return CredentialStoreError(f"{action} failed: {type(e).__name__}", cause=e)

    def get_by_email(self, email: str) -> User | None:
        try:
            return self.session.query(User).filter(User.email == email).first()
        except SQLAlchemyError as e:
            raise self._fail("get_by_email", e) from e

    def get_by_id(self, user_id: str) -> User | None:
        try:
            return self.session.get(User, user_id)
        except SQLAlchemyError as e:
            raise self._fail("get_by_id", e) from e

    def create_user(self, email: str, password_hash: str, username: str | None = None) -> User:
        """Insert a user with no active session. Raises DuplicateEmailError if the email is taken."""
        user = User(
            email=email,
            username=username,
            password_hash=password_hash,
            refresh_token=None,
        )
        try:
            self.session.add(user)
            self.session.commit()
            self.session.refresh(user)
        except IntegrityError as e:
            if not _is_duplicate_email(e):
                raise self._fail("create_user", e) from e
            self.session.rollback()
            raise DuplicateEmailError("email already registered", cause=e) from e
        except SQLAlchemyError as e:
            raise self._fail("create_user", e) from e
        return user

    def update_password_hash(self, user_id: str, password_hash: str) -> None:
        self._execute_update(
            "update_password_hash",
            update(User).where(User.id == user_id).values(password_hash=password_hash),
        )

    def set_refresh_token(self, user_id: str, token: str | None) -> bool:
        """Overwrite the stored refresh token (None clears it). Returns False if no such user."""
        return self._execute_update(
            "set_refresh_token",
            update(User).where(User.id == user_id).values(refresh_token=token),
        )

    def replace_refresh_token(self, user_id: str, expected: str, new: str) -> bool:
        """
        Compare-and-set: store `new` only if the stored token still equals `expected`.

        A single UPDATE ... WHERE id = ? AND refresh_token = ? statement, so of two
        concurrent rotations presenting the same token at most one matches a row.
        """
        return self._execute_update(
            "replace_refresh_token",
            update(User)
            .where(User.id == user_id, User.refresh_token == expected)
            .values(refresh_token=new),
        )

    def _execute_update(self, action: str, stmt: Update) -> bool:
        try:
            result = self.session.execute(stmt.execution_options(synchronize_session=False))
            self.session.commit()
        except SQLAlchemyError as e:
            raise self._fail(action, e) from e
        # Loaded instances may now hold a stale refresh_token.
        self.session.expire_all()
        return result.rowcount == 1
