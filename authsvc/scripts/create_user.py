"""
Create an account from the shell (same path as POST /user/auth/signup). Run from project root:
  python -m authsvc.scripts.create_user EMAIL PASSWORD [--username NAME]
Example:
  python -m authsvc.scripts.create_user ops@example.com 'Sup3rSecret' --username ops
"""
import argparse
import logging
import sys

from pydantic import ValidationError

from authsvc.core.config import Settings, get_settings
from authsvc.core.database import build_engine, build_session_factory
from authsvc.core.security import PasswordHasher
from authsvc.core.tokens import TokenConfig, TokenIssuer
from authsvc.schemas.auth import SignUpRequest
from authsvc.services.credential_store import CredentialStore
from authsvc.services.results import AuthError
from authsvc.services.session_manager import SessionManager


def main(argv: list[str] | None = None, settings: Settings | None = None) -> int:
    parser = argparse.ArgumentParser(description="Create an authsvc user account.")
    parser.add_argument("email", help="Login email address")
    parser.add_argument("password", help="Password (8+ chars, one digit, one uppercase letter)")
    parser.add_argument("--username", default=None, help="Optional display name (up to 255 chars)")
    args = parser.parse_args(argv)

    settings = settings or get_settings()
    logging.basicConfig(level=settings.LOG_LEVEL, format="%(levelname)s %(name)s %(message)s")

    try:
        body = SignUpRequest(
            email=args.email,
            password=args.password,
            confirmPassword=args.password,
            username=args.username,
        )
    except ValidationError as e:
        for err in e.errors():
            print(f"Invalid input: {err['msg']}", file=sys.stderr)
        return 1

    engine = build_engine(settings.DATABASE_URL, echo=settings.DEBUG)
    db = build_session_factory(engine)()
    try:
        manager = SessionManager(
            CredentialStore(db),
            PasswordHasher.from_settings(settings),
            TokenIssuer(TokenConfig.from_settings(settings)),
        )
        result = manager.sign_up(body.email, body.password, body.username)
        if isinstance(result, AuthError):
            print(f"Could not create user: {result.message}", file=sys.stderr)
            return 1
        print(f"Created user '{result.value.email}' (id {result.value.id}).")
        return 0
    finally:
        db.close()
        engine.dispose()


if __name__ == "__main__":
    sys.exit(main())
