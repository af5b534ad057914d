from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.admin_auth import require_admin
from app.api.deps import VideoService
from app.db.session import get_db
from app.models import Chapter, VideoAsset
from app.schemas.chapters import (
    ChapterCreateRequest,
    ChapterDescriptionUpdateRequest,
    ChapterListResponse,
    ChapterReorderRequest,
    ChapterResponse,
    ChapterTitleUpdateRequest,
    ChapterUpdateRequest,
    ChapterVideoUpdateRequest,
    ChapterWithVideoResponse,
    VideoAssetResponse,
)
from app.services import chapter_service

router = APIRouter(prefix="/v1/courses/{course_id}/chapters", tags=["chapters"], dependencies=[Depends(require_admin)])


def chapter_response(chapter: Chapter) -> ChapterResponse:
    return ChapterResponse(
        id=chapter.id,
        course_id=chapter.course_id,
        title=chapter.title,
        description=chapter.description,
        video_url=chapter.video_url,
        position=chapter.position,
        publish_flag=chapter.publish_flag,
        create_date=chapter.create_date.isoformat(),
        update_date=chapter.update_date.isoformat(),
    )


def video_asset_response(asset: VideoAsset | None) -> VideoAssetResponse | None:
    if asset is None:
        return None
    return VideoAssetResponse(id=asset.id, asset_id=asset.asset_id, playback_id=asset.playback_id, chapter_id=asset.chapter_id)


def chapter_with_video_response(chapter: Chapter) -> ChapterWithVideoResponse:
    return ChapterWithVideoResponse(
        **chapter_response(chapter).model_dump(),
        video_asset=video_asset_response(chapter.video_asset),
    )


@router.get("", response_model=ChapterListResponse)
def list_chapters(course_id: str, db: Session = Depends(get_db)) -> ChapterListResponse:
    chapters = chapter_service.list_chapters(db, course_id)
    return ChapterListResponse(chapters=[chapter_response(chapter) for chapter in chapters])


@router.post("", response_model=ChapterResponse, status_code=201)
def create_chapter(course_id: str, payload: ChapterCreateRequest, db: Session = Depends(get_db)) -> ChapterResponse:
    return chapter_response(chapter_service.create_chapter(db, course_id, payload.title))


@router.put("/reorder", response_model=ChapterListResponse)
def reorder_chapters(course_id: str, payload: ChapterReorderRequest, db: Session = Depends(get_db)) -> ChapterListResponse:
    chapters = chapter_service.reorder_chapters(db, course_id, [(item.id, item.position) for item in payload.chapters])
    return ChapterListResponse(chapters=[chapter_response(chapter) for chapter in chapters])


@router.get("/{chapter_id}", response_model=ChapterWithVideoResponse)
def get_chapter(course_id: str, chapter_id: str, db: Session = Depends(get_db)) -> ChapterWithVideoResponse:
    return chapter_with_video_response(chapter_service.get_chapter(db, course_id, chapter_id))


@router.put("/{chapter_id}", response_model=ChapterResponse)
def update_chapter(
    course_id: str,
    chapter_id: str,
    payload: ChapterUpdateRequest,
    db: Session = Depends(get_db),
) -> ChapterResponse:
    chapter = chapter_service.update_chapter(
        db, course_id, chapter_id, title=payload.title, description=payload.description
    )
    return chapter_response(chapter)


@router.delete("/{chapter_id}", response_model=ChapterResponse)
def delete_chapter(course_id: str, chapter_id: str, video: VideoService, db: Session = Depends(get_db)) -> ChapterResponse:
    return chapter_response(chapter_service.delete_chapter(db, course_id, chapter_id, video))


@router.put("/{chapter_id}/title", response_model=ChapterResponse)
def update_chapter_title(
    course_id: str,
    chapter_id: str,
    payload: ChapterTitleUpdateRequest,
    db: Session = Depends(get_db),
) -> ChapterResponse:
    return chapter_response(chapter_service.update_chapter_title(db, course_id, chapter_id, payload.title))


@router.put("/{chapter_id}/description", response_model=ChapterResponse)
def update_chapter_description(
    course_id: str,
    chapter_id: str,
    payload: ChapterDescriptionUpdateRequest,
    db: Session = Depends(get_db),
) -> ChapterResponse:
    return chapter_response(chapter_service.update_chapter_description(db, course_id, chapter_id, payload.description))


@router.put("/{chapter_id}/video", response_model=ChapterWithVideoResponse)
def update_chapter_video(
    course_id: str,
    chapter_id: str,
    payload: ChapterVideoUpdateRequest,
    video: VideoService,
    db: Session = Depends(get_db),
) -> ChapterWithVideoResponse:
    chapter = chapter_service.update_chapter_video(db, course_id, chapter_id, str(payload.video_url), video)
    return chapter_with_video_response(chapter)


@router.put("/{chapter_id}/publish", response_model=ChapterResponse)
def publish_chapter(course_id: str, chapter_id: str, db: Session = Depends(get_db)) -> ChapterResponse:
    return chapter_response(chapter_service.publish_chapter(db, course_id, chapter_id))


@router.put("/{chapter_id}/unpublish", response_model=ChapterResponse)
def unpublish_chapter(course_id: str, chapter_id: str, db: Session = Depends(get_db)) -> ChapterResponse:
    return chapter_response(chapter_service.unpublish_chapter(db, course_id, chapter_id))
