import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_SECRET"] = "test-jwt-secret"
os.environ["ADMIN_USER_ID"] = "admin-user"
os.environ["STRIPE_API_KEY"] = "sk_test_dummy"
os.environ["STRIPE_WEBHOOK_SECRET"] = "whsec_test_secret"
os.environ["APP_PUBLIC_URL"] = "http://localhost:3000"
os.environ["VIDEO_RETRY_BACKOFF_SECONDS"] = "0"

import hashlib  # noqa: E402
import hmac  # noqa: E402
import time  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from app.core.config import get_settings  # noqa: E402
from app.core.error_codes import ErrorCode  # noqa: E402
from app.core.errors import ApiError  # noqa: E402
from app.core.security import create_access_token  # noqa: E402
from app.db.base import Base  # noqa: E402
from app.db.session import get_db  # noqa: E402
from app.main import app  # noqa: E402
from app.services import category_service, chapter_service, course_service  # noqa: E402
from app.services.payments import StripePaymentService, get_payment_service  # noqa: E402
from app.services.video import VideoAssetRef, get_video_service  # noqa: E402

ADMIN_USER_ID = "admin-user"
WEBHOOK_SECRET = "whsec_test_secret"


class FakeVideoService:
    def __init__(self) -> None:
        self.created: list[str] = []
        self.deleted: list[str] = []
        self.fail_create = False
        self._seq = 0

    def create_asset(self, source_url: str) -> VideoAssetRef:
        if self.fail_create:
            raise ApiError(ErrorCode.VIDEO_HOST_FAILED)
        self._seq += 1
        self.created.append(source_url)
        return VideoAssetRef(asset_id=f"asset-{self._seq}", playback_id=f"playback-{self._seq}")

    def delete_asset(self, asset_id: str) -> None:
        self.deleted.append(asset_id)


class FakePaymentService:
    """Records outgoing Stripe calls; webhook verification uses the real signature check."""

    def __init__(self) -> None:
        self.customers: list[str | None] = []
        self.sessions: list[dict] = []
        self._stripe = StripePaymentService(get_settings())

    def create_customer(self, email):
        self.customers.append(email)
        return f"cus_{len(self.customers)}"

    def create_checkout_session(self, **kwargs):
        self.sessions.append(kwargs)
        return f"https://checkout.stripe.test/session/{len(self.sessions)}"

    def verify_webhook(self, payload, signature):
        return self._stripe.verify_webhook(payload, signature)


def sign_webhook(payload: bytes, secret: str = WEBHOOK_SECRET, timestamp: int | None = None) -> str:
    ts = int(time.time()) if timestamp is None else timestamp
    signed = f"{ts}.".encode("utf-8") + payload
    digest = hmac.new(secret.encode("utf-8"), signed, hashlib.sha256).hexdigest()
    return f"t={ts},v1={digest}"


def bearer(user_id: str, email: str | None = None) -> dict[str, str]:
    extra = {"email": email} if email else None
    return {"Authorization": f"Bearer {create_access_token(user_id, extra)}"}


@pytest.fixture()
def session_factory():
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    Base.metadata.create_all(engine)
    factory = sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False)
    yield factory
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture()
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def video() -> FakeVideoService:
    return FakeVideoService()


@pytest.fixture()
def payments() -> FakePaymentService:
    return FakePaymentService()


@pytest.fixture()
def client(session_factory, video, payments):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_video_service] = lambda: video
    app.dependency_overrides[get_payment_service] = lambda: payments
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture()
def admin_headers() -> dict[str, str]:
    return bearer(ADMIN_USER_ID)


@pytest.fixture()
def user_headers() -> dict[str, str]:
    return bearer("user-1", "learner@example.com")


def build_course(db, video, *, title="Intro to Python", price=1000, publish=True, category_name="Programming"):
    """Create a course with one published chapter; publish the course unless told otherwise."""
    category = category_service.create_category(db, category_name)
    course = course_service.create_course(db, title)
    course_service.update_course(
        db,
        course.id,
        {
            "description": "Learn the basics",
            "image_url": "https://images.example.com/intro.png",
            "category_id": category.id,
            "price": price,
        },
    )
    chapter = add_published_chapter(db, video, course.id, "Getting started")
    if publish:
        course_service.publish_course(db, course.id)
    return course, chapter


def add_published_chapter(db, video, course_id: str, title: str):
    chapter = chapter_service.create_chapter(db, course_id, title)
    chapter_service.update_chapter(db, course_id, chapter.id, description=f"{title} description")
    chapter_service.update_chapter_video(db, course_id, chapter.id, f"https://videos.example.com/{chapter.id}.mp4", video)
    return chapter_service.publish_chapter(db, course_id, chapter.id)


@pytest.fixture()
def make_course(db, video):
    def _make(**kwargs):
        return build_course(db, video, **kwargs)

    return _make


@pytest.fixture()
def add_chapter(db, video):
    def _add(course_id: str, title: str):
        return add_published_chapter(db, video, course_id, title)

    return _add


@pytest.fixture()
def token_headers():
    return bearer


@pytest.fixture()
def webhook_signer():
    return sign_webhook


@pytest.fixture(scope="session")
def integration_enabled() -> bool:
    return os.getenv("RUN_INTEGRATION") == "1"
