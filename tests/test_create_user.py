"""Tests for the create_user CLI against a file-backed SQLite database."""

import io
import os
import tempfile
import unittest
from contextlib import redirect_stderr, redirect_stdout

from argon2 import PasswordHasher as Argon2Hasher
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from authsvc.core.config import Settings
from authsvc.models import Base, User
from authsvc.scripts.create_user import main


class TestCreateUserCommand(unittest.TestCase):
    """main() validates like the signup route and writes through sign_up."""

    def setUp(self) -> None:
        fd, self.db_path = tempfile.mkstemp(suffix=".db")
        os.close(fd)
        self.engine = create_engine(f"sqlite:///{self.db_path}")
        Base.metadata.create_all(self.engine)
        self.settings = Settings(
            _env_file=None,
            DATABASE_URL=f"sqlite:///{self.db_path}",
            ACCESS_TOKEN_SECRET="cli-access-secret-0123456789abcdef0123456789",
            REFRESH_TOKEN_SECRET="cli-refresh-secret-fedcba9876543210fedcba987",
            ARGON2_TIME_COST=1,
            ARGON2_MEMORY_COST_KIB=1024,
            ARGON2_PARALLELISM=1,
        )

    def tearDown(self) -> None:
        self.engine.dispose()
        os.remove(self.db_path)

    def run_main(self, *argv: str) -> tuple[int, str, str]:
        out, err = io.StringIO(), io.StringIO()
        with redirect_stdout(out), redirect_stderr(err):
            code = main(list(argv), settings=self.settings)
        return code, out.getvalue(), err.getvalue()

    def users(self) -> list[User]:
        with sessionmaker(bind=self.engine)() as db:
            return db.query(User).all()

    def test_creates_user_with_hashed_password(self) -> None:
        code, out, _ = self.run_main("Ops@Corp.io", "Sup3rSecret", "--username", "a")
        self.assertEqual(code, 0)
        self.assertIn("ops@corp.io", out)
        [user] = self.users()
        self.assertEqual(user.email, "ops@corp.io")
        self.assertEqual(user.username, "a")
        self.assertIsNone(user.refresh_token)
        self.assertNotEqual(user.password_hash, "Sup3rSecret")
        self.assertTrue(Argon2Hasher().verify(user.password_hash, "Sup3rSecret"))

    def test_duplicate_email_fails(self) -> None:
        self.assertEqual(self.run_main("ops@corp.io", "Sup3rSecret")[0], 0)
        code, _, err = self.run_main("ops@corp.io", "An0therSecret")
        self.assertEqual(code, 1)
        self.assertIn("Email already in use", err)
        self.assertEqual(len(self.users()), 1)

    def test_weak_password_rejected_before_writing(self) -> None:
        code, _, err = self.run_main("ops@corp.io", "weakpass")
        self.assertEqual(code, 1)
        self.assertIn("Invalid input", err)
        self.assertEqual(self.users(), [])


if __name__ == "__main__":
    unittest.main()
