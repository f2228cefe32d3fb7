"""Session lifecycle: signup, login, refresh-token rotation and logout."""

import hmac
import logging

from argon2.exceptions import HashingError

from authsvc.core.security import PasswordHasher
from authsvc.core.tokens import AccessClaims, TokenInvalid, TokenIssuer, TokenPair
from authsvc.services.credential_store import (
    CredentialStore,
    CredentialStoreError,
    DuplicateEmailError,
)
from authsvc.services.results import (
    AuthError,
    AuthErrorKind,
    LoginResult,
    Success,
    UserInfo,
)

logger = logging.getLogger(__name__)


class SessionManager:
    """
    Orchestrates the credential store, password hasher and token issuer.

    Every operation returns Success(value) or AuthError; store and hashing failures are
    caught here and reported as INTERNAL_FAILURE. Exactly one refresh token is valid per
    user: login overwrites it, refresh replaces it with compare-and-set, logout clears it.
    """

    def __init__(
        self,
        store: CredentialStore,
        hasher: PasswordHasher,
        issuer: TokenIssuer,
    ) -> None:
        self.store = store
        self.hasher = hasher
        self.issuer = issuer

    def _internal(self, operation: str, e: Exception) -> AuthError:
        reason = f"{operation}: {type(e).__name__}: {e}"
        logger.error("Session operation failed: %s", reason)
        return AuthError(AuthErrorKind.INTERNAL_FAILURE, reason=reason)

    def sign_up(
        self,
        email: str,
        password: str,
        username: str | None = None,
    ) -> Success[UserInfo] | AuthError:
        """Create a user with no active session. Fails with ALREADY_EXISTS if the email is taken."""
        try:
            if self.store.get_by_email(email) is not None:
                logger.info("Signup rejected: email already registered")
                return AuthError(AuthErrorKind.ALREADY_EXISTS, reason="email exists")
            password_hash = self.hasher.hash(password)
            user = self.store.create_user(email, password_hash, username)
            info = UserInfo.from_model(user)
        except DuplicateEmailError:
            # Lost a race with a concurrent signup for the same email.
            logger.info("Signup rejected: unique email constraint")
            return AuthError(AuthErrorKind.ALREADY_EXISTS, reason="unique constraint")
        except (CredentialStoreError, HashingError) as e:
            return self._internal("sign_up", e)
        logger.info("User created", extra={"user_id": info.id})
        return Success(info)

    def login(self, email: str, password: str) -> Success[LoginResult] | AuthError:
        """
        Verify credentials and start a session. Unknown email and wrong password both
        yield INVALID_CREDENTIALS so callers cannot tell which one happened.
        """
        try:
            user = self.store.get_by_email(email)
            if user is None:
                self.hasher.verify_dummy(password)
                logger.info("Login failed: unknown email")
                return AuthError(AuthErrorKind.INVALID_CREDENTIALS, reason="unknown email")
            if not self.hasher.verify(user.password_hash, password):
                logger.info("Login failed: password mismatch", extra={"user_id": user.id})
                return AuthError(AuthErrorKind.INVALID_CREDENTIALS, reason="password mismatch")

            info = UserInfo.from_model(user)
            if self.hasher.needs_rehash(user.password_hash):
                self.store.update_password_hash(info.id, self.hasher.hash(password))
                logger.info("Password hash upgraded", extra={"user_id": info.id})

            tokens = self.issuer.issue(info.id, info.email)
            # Overwriting the stored token invalidates any previously issued refresh token.
            if not self.store.set_refresh_token(info.id, tokens.refresh_token):
                return AuthError(AuthErrorKind.INVALID_CREDENTIALS, reason="user removed during login")
        except (CredentialStoreError, HashingError) as e:
            return self._internal("login", e)
        logger.info("Login succeeded", extra={"user_id": info.id})
        return Success(LoginResult(user=info, tokens=tokens))

    def refresh(self, refresh_token: str | None) -> Success[TokenPair] | AuthError:
        """Rotate the refresh token: the presented token must be the one currently stored."""
        if not refresh_token:
            return AuthError(AuthErrorKind.MISSING_TOKEN, reason="no refresh token")
        claims = self.issuer.verify_refresh(refresh_token)
        if isinstance(claims, TokenInvalid):
            logger.info("Refresh rejected: token %s", claims.reason.value)
            return AuthError(AuthErrorKind.INVALID_TOKEN, reason=claims.reason.value)

        try:
            user = self.store.get_by_id(claims.user_id)
            if user is None:
                logger.info("Refresh rejected: user not found", extra={"user_id": claims.user_id})
                return AuthError(AuthErrorKind.USER_NOT_FOUND, reason="user not found")
            stored = user.refresh_token
            if stored is None or not hmac.compare_digest(stored, refresh_token):
                logger.warning(
                    "Refresh rejected: token superseded or revoked",
                    extra={"user_id": user.id},
                )
                return AuthError(AuthErrorKind.INVALID_TOKEN, reason="superseded")

            tokens = self.issuer.issue(user.id, user.email)
            if not self.store.replace_refresh_token(claims.user_id, refresh_token, tokens.refresh_token):
                logger.warning(
                    "Refresh rejected: token rotated concurrently",
                    extra={"user_id": claims.user_id},
                )
                return AuthError(AuthErrorKind.INVALID_TOKEN, reason="superseded concurrently")
        except CredentialStoreError as e:
            return self._internal("refresh", e)
        logger.info("Refresh token rotated", extra={"user_id": claims.user_id})
        return Success(tokens)

    def logout(self, refresh_token: str | None) -> Success[None] | AuthError:
        """
        End the user's session by clearing the stored refresh token.

        The token only has to be well signed and unexpired: a token that has already been
        rotated out still clears the user's current session.
        """
        if not refresh_token:
            return AuthError(AuthErrorKind.NOT_LOGGED_IN, reason="no refresh token")
        claims = self.issuer.verify_refresh(refresh_token)
        if isinstance(claims, TokenInvalid):
            logger.info("Logout rejected: token %s", claims.reason.value)
            return AuthError(AuthErrorKind.INVALID_TOKEN, reason=claims.reason.value)

        try:
            user = self.store.get_by_id(claims.user_id)
            if user is None:
                return AuthError(AuthErrorKind.INVALID_TOKEN, reason="unknown user")
            if user.refresh_token is None or not hmac.compare_digest(user.refresh_token, refresh_token):
                logger.warning(
                    "Logout with a token that is not the stored one; clearing session anyway",
                    extra={"user_id": claims.user_id},
                )
            self.store.set_refresh_token(claims.user_id, None)
        except CredentialStoreError as e:
            return self._internal("logout", e)
        logger.info("Logged out", extra={"user_id": claims.user_id})
        return Success(None)

    def authenticate_access(self, access_token: str | None) -> Success[AccessClaims] | AuthError:
        """Stateless access-token check; no store lookup."""
        if not access_token:
            return AuthError(AuthErrorKind.MISSING_TOKEN, reason="no access token")
        claims = self.issuer.verify_access(access_token)
        if isinstance(claims, TokenInvalid):
            return AuthError(AuthErrorKind.INVALID_TOKEN, reason=claims.reason.value)
        return Success(claims)
