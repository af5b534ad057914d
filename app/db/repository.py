"""Typed lookups over the course tables.

No business rules live here: callers decide what a missing row means.
Every list is returned in a fixed order (courses newest first, chapters by
position, categories by name).
"""

from __future__ import annotations

from collections.abc import Iterable

from sqlalchemy import func, select
from sqlalchemy.orm import Session, selectinload

from app.models import Category, Chapter, Course, PaymentCustomer, ProcessedWebhookEvent, Purchase, VideoAsset


def get_course(db: Session, course_id: str) -> Course | None:
    return db.get(Course, course_id)


def list_courses(db: Session) -> list[Course]:
    stmt = select(Course).options(selectinload(Course.chapters)).order_by(Course.create_date.desc())
    return list(db.execute(stmt).scalars().all())


def get_chapter(db: Session, course_id: str, chapter_id: str) -> Chapter | None:
    return db.execute(
        select(Chapter).where(Chapter.id == chapter_id, Chapter.course_id == course_id)
    ).scalars().first()


def list_chapters(db: Session, course_id: str, *, published_only: bool = False) -> list[Chapter]:
    stmt = select(Chapter).where(Chapter.course_id == course_id)
    if published_only:
        stmt = stmt.where(Chapter.publish_flag.is_(True))
    return list(db.execute(stmt.order_by(Chapter.position.asc())).scalars().all())


def max_chapter_position(db: Session, course_id: str) -> int:
    value = db.execute(select(func.max(Chapter.position)).where(Chapter.course_id == course_id)).scalar_one()
    return int(value or 0)


def count_published_chapters(db: Session, course_id: str) -> int:
    stmt = select(func.count()).select_from(Chapter).where(
        Chapter.course_id == course_id,
        Chapter.publish_flag.is_(True),
    )
    return int(db.execute(stmt).scalar_one())


def get_category(db: Session, category_id: str) -> Category | None:
    return db.get(Category, category_id)


def category_exists(db: Session, category_id: str) -> bool:
    return db.execute(select(Category.id).where(Category.id == category_id)).scalar_one_or_none() is not None


def list_categories(db: Session) -> list[Category]:
    return list(db.execute(select(Category).order_by(Category.name.asc())).scalars().all())


def get_video_asset(db: Session, chapter_id: str) -> VideoAsset | None:
    return db.execute(select(VideoAsset).where(VideoAsset.chapter_id == chapter_id)).scalars().first()


def video_assets_for_course(db: Session, course_id: str) -> list[VideoAsset]:
    stmt = (
        select(VideoAsset)
        .join(Chapter, VideoAsset.chapter_id == Chapter.id)
        .where(Chapter.course_id == course_id)
    )
    return list(db.execute(stmt).scalars().all())


def purchase_exists(db: Session, course_id: str, user_id: str) -> bool:
    exists = db.execute(
        select(Purchase.id).where(Purchase.course_id == course_id, Purchase.user_id == user_id).limit(1)
    ).scalar_one_or_none()
    return exists is not None


def purchased_course_ids(db: Session, user_id: str, course_ids: Iterable[str] | None = None) -> set[str]:
    stmt = select(Purchase.course_id).where(Purchase.user_id == user_id)
    if course_ids is not None:
        stmt = stmt.where(Purchase.course_id.in_(list(course_ids)))
    return set(db.execute(stmt).scalars().all())


def purchase_counts(db: Session, course_ids: list[str]) -> dict[str, int]:
    if not course_ids:
        return {}
    rows = db.execute(
        select(Purchase.course_id, func.count(Purchase.id).label("cnt"))
        .where(Purchase.course_id.in_(course_ids))
        .group_by(Purchase.course_id)
    ).all()
    return {row.course_id: row.cnt for row in rows}


def get_payment_customer(db: Session, user_id: str) -> PaymentCustomer | None:
    return db.execute(select(PaymentCustomer).where(PaymentCustomer.user_id == user_id)).scalars().first()


def webhook_event_processed(db: Session, event_id: str) -> bool:
    exists = db.execute(
        select(ProcessedWebhookEvent.id).where(ProcessedWebhookEvent.event_id == event_id)
    ).scalar_one_or_none()
    return exists is not None
