"""Publish guards for courses and chapters.

These are plain functions over already-loaded rows so that every publish
transition, and the tests, can ask the same question without a database.
"""

from __future__ import annotations

from collections.abc import Iterable

from app.models import Chapter, Course, VideoAsset


def _blank(value: str | None) -> bool:
    return value is None or not value.strip()


def course_missing_fields(course: Course, chapters: Iterable[Chapter]) -> list[str]:
    missing = [
        name
        for name in ("title", "description", "image_url", "category_id")
        if _blank(getattr(course, name))
    ]
    if course.price is None:
        missing.append("price")
    if not any(chapter.publish_flag for chapter in chapters):
        missing.append("published_chapter")
    return missing


def can_publish_course(course: Course, chapters: Iterable[Chapter]) -> bool:
    return not course_missing_fields(course, chapters)


def chapter_missing_fields(chapter: Chapter, asset: VideoAsset | None) -> list[str]:
    missing = [name for name in ("title", "description", "video_url") if _blank(getattr(chapter, name))]
    if asset is None:
        missing.append("video_asset")
    return missing


def can_publish_chapter(chapter: Chapter, asset: VideoAsset | None) -> bool:
    return not chapter_missing_fields(chapter, asset)
