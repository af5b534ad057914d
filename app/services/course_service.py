from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy import delete as sql_delete
from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from app.core.error_codes import ErrorCode
from app.core.errors import ApiError
from app.core.security import now_utc
from app.db import repository
from app.db.session import transaction
from app.models import Chapter, Course, Purchase, VideoAsset
from app.services.publish_guard import can_publish_course, course_missing_fields
from app.services.video import VideoAssetService

logger = logging.getLogger(__name__)

@dataclass
class AdminCourseView:
    course: Course
    chapters: list[Chapter]
    purchase_count: int


@dataclass
class PublishedCourseView:
    course: Course
    chapters: list[Chapter]
    purchased: bool


def get_course_or_404(db: Session, course_id: str) -> Course:
    course = repository.get_course(db, course_id)
    if not course:
        raise ApiError(ErrorCode.COURSE_NOT_FOUND)
    return course


def list_admin_courses(db: Session) -> list[AdminCourseView]:
    """Return all courses (newest first) with their chapters and purchase count."""
    courses = repository.list_courses(db)
    counts = repository.purchase_counts(db, [course.id for course in courses])
    return [AdminCourseView(course, list(course.chapters), counts.get(course.id, 0)) for course in courses]


def get_course(db: Session, course_id: str) -> AdminCourseView:
    course = get_course_or_404(db, course_id)
    counts = repository.purchase_counts(db, [course.id])
    return AdminCourseView(course, repository.list_chapters(db, course.id), counts.get(course.id, 0))


def create_course(db: Session, title: str) -> Course:
    course = Course(title=title.strip(), publish_flag=False)
    with transaction(db):
        db.add(course)
    db.refresh(course)
    return course


def update_course(db: Session, course_id: str, changes: dict) -> Course:
    """Apply a partial update of course columns."""
    course = get_course_or_404(db, course_id)
    category_id = changes.get("category_id")
    if category_id is not None and not repository.category_exists(db, category_id):
        raise ApiError(ErrorCode.CATEGORY_NOT_FOUND)

    with transaction(db):
        for field, value in changes.items():
            setattr(course, field, value.strip() if isinstance(value, str) else value)
        course.update_date = now_utc()
    db.refresh(course)
    return course


def update_course_field(db: Session, course_id: str, field: str, value) -> Course:
    return update_course(db, course_id, {field: value})


def publish_course(db: Session, course_id: str) -> Course:
    course = get_course_or_404(db, course_id)
    chapters = repository.list_chapters(db, course_id, published_only=True)
    if not can_publish_course(course, chapters):
        missing = ", ".join(course_missing_fields(course, chapters))
        raise ApiError(ErrorCode.COURSE_REQUIRED_FIELDS_EMPTY, f"Required course fields are empty: {missing}")

    with transaction(db):
        course.publish_flag = True
        course.update_date = now_utc()
    return course


def unpublish_course(db: Session, course_id: str) -> Course:
    course = get_course_or_404(db, course_id)
    with transaction(db):
        course.publish_flag = False
        course.update_date = now_utc()
    return course


def delete_course(db: Session, course_id: str, video: VideoAssetService) -> Course:
    """Hard-delete a course with its chapters, video assets, and purchases.

    Hosted assets are removed first; a host failure leaves the rows untouched.
    """
    course = get_course_or_404(db, course_id)

    for asset in repository.video_assets_for_course(db, course.id):
        video.delete_asset(asset.asset_id)

    chapter_ids = select(Chapter.id).where(Chapter.course_id == course.id)
    with transaction(db):
        db.execute(sql_delete(VideoAsset).where(VideoAsset.chapter_id.in_(chapter_ids)))
        db.execute(sql_delete(Purchase).where(Purchase.course_id == course.id))
        db.execute(sql_delete(Chapter).where(Chapter.course_id == course.id))
        db.execute(sql_delete(Course).where(Course.id == course.id))
    logger.info("Deleted course %s", course.id)
    return course


def _published_course_stmt():
    has_published_chapter = (
        select(Chapter.id)
        .where(Chapter.course_id == Course.id, Chapter.publish_flag.is_(True))
        .exists()
    )
    return (
        select(Course)
        .where(Course.publish_flag.is_(True), has_published_chapter)
        .options(selectinload(Course.chapters))
    )


def _published_chapters(course: Course) -> list[Chapter]:
    return [chapter for chapter in course.chapters if chapter.publish_flag]


def list_published_courses(
    db: Session,
    user_id: str,
    title: str | None = None,
    category_id: str | None = None,
) -> list[PublishedCourseView]:
    stmt = _published_course_stmt()
    if title:
        stmt = stmt.where(Course.title.icontains(title, autoescape=True))
    if category_id:
        stmt = stmt.where(Course.category_id == category_id)
    courses = db.execute(stmt.order_by(Course.create_date.desc())).scalars().all()

    purchased = repository.purchased_course_ids(db, user_id, [course.id for course in courses])
    return [PublishedCourseView(course, _published_chapters(course), course.id in purchased) for course in courses]


def get_published_course(db: Session, course_id: str, user_id: str) -> PublishedCourseView:
    course = db.execute(_published_course_stmt().where(Course.id == course_id)).scalars().first()
    if not course:
        raise ApiError(ErrorCode.COURSE_NOT_FOUND)
    return PublishedCourseView(
        course,
        _published_chapters(course),
        repository.purchase_exists(db, course.id, user_id),
    )


def list_purchased_courses(db: Session, user_id: str) -> list[Course]:
    stmt = (
        select(Course)
        .join(Purchase, Purchase.course_id == Course.id)
        .where(Purchase.user_id == user_id)
        .options(selectinload(Course.chapters))
        .order_by(Course.create_date.desc())
    )
    return list(db.execute(stmt).scalars().unique().all())
