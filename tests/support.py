"""Shared fixture for HTTP-level tests: the app wired to a fresh in-memory SQLite database."""

import unittest
from collections.abc import Generator

from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.database import get_db
from app.core.security import create_access_token, hash_password
from app.main import app
from app.models import Base, Image, User


class ApiTestCase(unittest.TestCase):
    """Each test gets its own empty database and a TestClient bound to it."""

    def setUp(self) -> None:
        self.engine = create_engine(
            "sqlite://",
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
        Base.metadata.create_all(self.engine)
        self.SessionTesting = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)

        def override_get_db() -> Generator[Session, None, None]:
            db = self.SessionTesting()
            try:
                yield db
            finally:
                db.close()

        app.dependency_overrides[get_db] = override_get_db
        self.client = TestClient(app)

    def tearDown(self) -> None:
        app.dependency_overrides.clear()
        Base.metadata.drop_all(self.engine)
        self.engine.dispose()

    def create_user(
        self,
        username: str = "al",
        email: str = "al@x.com",
        password: str = "pw1",
        role: str = "user",
    ) -> User:
        """Insert a user directly, bypassing the register route."""
        with self.SessionTesting() as db:
            user = User(
                username=username,
                email=email,
                password_hash=hash_password(password),
                role=role,
            )
            db.add(user)
            db.commit()
            db.refresh(user)
            db.expunge(user)
        return user

    def create_image(self, owner: User, public_id: str = "img-1", **kwargs: object) -> Image:
        with self.SessionTesting() as db:
            image = Image(
                url=f"https://res.cloudinary.com/demo/image/upload/{public_id}.png",
                public_id=public_id,
                uploaded_by=owner.id,
                **kwargs,
            )
            db.add(image)
            db.commit()
            db.refresh(image)
            db.expunge(image)
        return image

    def get_user(self, user_id: int) -> User | None:
        with self.SessionTesting() as db:
            user = db.get(User, user_id)
            if user is not None:
                db.expunge(user)
            return user

    def auth_headers(self, user: User) -> dict[str, str]:
        token = create_access_token(
            {"userId": user.id, "username": user.username, "role": user.role}
        )
        return {"Authorization": f"Bearer {token}"}
