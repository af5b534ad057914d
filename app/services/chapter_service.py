from __future__ import annotations

import logging

from sqlalchemy import delete as sql_delete
from sqlalchemy.orm import Session

from app.core.error_codes import ErrorCode
from app.core.errors import ApiError
from app.core.security import now_utc
from app.db import repository
from app.db.session import transaction
from app.models import Chapter, Course, VideoAsset
from app.services.course_service import get_course_or_404
from app.services.publish_guard import chapter_missing_fields
from app.services.video import VideoAssetService

logger = logging.getLogger(__name__)


def get_chapter_or_404(db: Session, course_id: str, chapter_id: str) -> Chapter:
    get_course_or_404(db, course_id)
    chapter = repository.get_chapter(db, course_id, chapter_id)
    if not chapter:
        raise ApiError(ErrorCode.CHAPTER_NOT_FOUND)
    return chapter


def _unpublish_course_if_no_published_chapters(db: Session, course_id: str) -> None:
    """Keep a published course backed by at least one published chapter.

    Must run inside the caller's transaction, after its chapter changes.
    """
    db.flush()
    if repository.count_published_chapters(db, course_id) > 0:
        return
    course = db.get(Course, course_id)
    if course is not None and course.publish_flag:
        course.publish_flag = False
        course.update_date = now_utc()
        logger.info("Course %s unpublished: no published chapters left", course_id)


def list_chapters(db: Session, course_id: str) -> list[Chapter]:
    get_course_or_404(db, course_id)
    return repository.list_chapters(db, course_id)


def get_chapter(db: Session, course_id: str, chapter_id: str) -> Chapter:
    return get_chapter_or_404(db, course_id, chapter_id)


def create_chapter(db: Session, course_id: str, title: str) -> Chapter:
    get_course_or_404(db, course_id)
    with transaction(db):
        chapter = Chapter(
            course_id=course_id,
            title=title.strip(),
            position=repository.max_chapter_position(db, course_id) + 1,
            publish_flag=False,
        )
        db.add(chapter)
    db.refresh(chapter)
    return chapter


def update_chapter(
    db: Session,
    course_id: str,
    chapter_id: str,
    *,
    title: str | None = None,
    description: str | None = None,
) -> Chapter:
    chapter = get_chapter_or_404(db, course_id, chapter_id)
    with transaction(db):
        if title is not None:
            chapter.title = title.strip()
        if description is not None:
            chapter.description = description.strip()
        chapter.update_date = now_utc()
    return chapter


def update_chapter_title(db: Session, course_id: str, chapter_id: str, title: str) -> Chapter:
    return update_chapter(db, course_id, chapter_id, title=title)


def update_chapter_description(db: Session, course_id: str, chapter_id: str, description: str) -> Chapter:
    return update_chapter(db, course_id, chapter_id, description=description)


def update_chapter_video(
    db: Session,
    course_id: str,
    chapter_id: str,
    video_url: str,
    video: VideoAssetService,
) -> Chapter:
    """Replace the chapter's hosted video.

    The old hosted asset is deleted before the new one is created. Rows are
    swapped in a single transaction afterwards; if that fails, the new hosted
    asset is deleted again so nothing is left orphaned on the host. If the
    new asset cannot be created, the stale row is dropped and the chapter
    unpublished.
    """
    chapter = get_chapter_or_404(db, course_id, chapter_id)

    existing = repository.get_video_asset(db, chapter.id)
    if existing:
        video.delete_asset(existing.asset_id)

    try:
        created = video.create_asset(video_url)
    except Exception:
        if existing:
            _drop_stale_video(db, chapter)
        raise

    try:
        with transaction(db):
            db.execute(sql_delete(VideoAsset).where(VideoAsset.chapter_id == chapter.id))
            db.add(VideoAsset(chapter_id=chapter.id, asset_id=created.asset_id, playback_id=created.playback_id))
            chapter.video_url = video_url
            chapter.update_date = now_utc()
    except Exception:
        logger.error("Storing video for chapter %s failed, removing asset %s", chapter.id, created.asset_id)
        video.delete_asset(created.asset_id)
        raise

    db.refresh(chapter)
    return chapter


def _drop_stale_video(db: Session, chapter: Chapter) -> None:
    """Forget a hosted asset that is already gone; a chapter without video cannot stay published."""
    with transaction(db):
        db.execute(sql_delete(VideoAsset).where(VideoAsset.chapter_id == chapter.id))
        if chapter.publish_flag:
            chapter.publish_flag = False
            chapter.update_date = now_utc()
            _unpublish_course_if_no_published_chapters(db, chapter.course_id)
    logger.warning("Dropped stale video asset of chapter %s", chapter.id)


def reorder_chapters(db: Session, course_id: str, positions: list[tuple[str, int]]) -> list[Chapter]:
    """Apply (chapter_id, position) pairs atomically.

    Every id must belong to the course and the resulting positions must be
    exactly 1..N; otherwise nothing is changed.
    """
    get_course_or_404(db, course_id)
    chapters = {chapter.id: chapter for chapter in repository.list_chapters(db, course_id)}
    if any(chapter_id not in chapters for chapter_id, _ in positions):
        raise ApiError(ErrorCode.CHAPTER_NOT_FOUND)

    resulting = {chapter_id: chapter.position for chapter_id, chapter in chapters.items()}
    resulting.update(dict(positions))
    if sorted(resulting.values()) != list(range(1, len(resulting) + 1)):
        raise ApiError(ErrorCode.CHAPTER_POSITIONS_INVALID)

    with transaction(db):
        now = now_utc()
        for chapter_id, position in positions:
            chapter = chapters[chapter_id]
            chapter.position = position
            chapter.update_date = now
    return repository.list_chapters(db, course_id)


def delete_chapter(db: Session, course_id: str, chapter_id: str, video: VideoAssetService) -> Chapter:
    chapter = get_chapter_or_404(db, course_id, chapter_id)

    asset = repository.get_video_asset(db, chapter.id)
    if asset:
        video.delete_asset(asset.asset_id)

    with transaction(db):
        db.execute(sql_delete(VideoAsset).where(VideoAsset.chapter_id == chapter.id))
        db.execute(sql_delete(Chapter).where(Chapter.id == chapter.id))
        remaining = [item for item in repository.list_chapters(db, course_id) if item.id != chapter.id]
        for position, item in enumerate(remaining, start=1):
            item.position = position
        _unpublish_course_if_no_published_chapters(db, course_id)
    return chapter


def unpublish_chapter(db: Session, course_id: str, chapter_id: str) -> Chapter:
    chapter = get_chapter_or_404(db, course_id, chapter_id)
    with transaction(db):
        chapter.publish_flag = False
        chapter.update_date = now_utc()
        _unpublish_course_if_no_published_chapters(db, course_id)
    return chapter


def publish_chapter(db: Session, course_id: str, chapter_id: str) -> Chapter:
    chapter = get_chapter_or_404(db, course_id, chapter_id)
    asset = repository.get_video_asset(db, chapter.id)
    if asset is None:
        raise ApiError(ErrorCode.MUX_DATA_NOT_FOUND)
    missing = chapter_missing_fields(chapter, asset)
    if missing:
        raise ApiError(
            ErrorCode.CHAPTER_REQUIRED_FIELDS_EMPTY,
            f"Required chapter fields are empty: {', '.join(missing)}",
        )

    with transaction(db):
        chapter.publish_flag = True
        chapter.update_date = now_utc()
    return chapter
