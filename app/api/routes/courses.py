from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.api.admin_auth import require_admin
from app.api.deps import CurrentUser, Payments, VideoService
from app.api.routes.categories import category_response
from app.api.routes.chapters import chapter_response, chapter_with_video_response
from app.core.config import Settings, get_settings
from app.db.session import get_db
from app.models import Course, Purchase
from app.schemas.courses import (
    AdminCourseListResponse,
    AdminCourseResponse,
    CheckoutResponse,
    CourseCategoryUpdateRequest,
    CourseCreateRequest,
    CourseDescriptionUpdateRequest,
    CoursePriceUpdateRequest,
    CourseResponse,
    CourseSourceUrlUpdateRequest,
    CourseThumbnailUpdateRequest,
    CourseTitleUpdateRequest,
    CourseUpdateRequest,
    PublishedCourseDetailResponse,
    PublishedCourseListResponse,
    PublishedCourseResponse,
    PurchasedCourseListResponse,
    PurchasedCourseResponse,
    PurchaseResponse,
)
from app.services import course_service, purchase_service
from app.services.course_service import AdminCourseView

router = APIRouter(prefix="/v1/courses", tags=["courses"])
admin = [Depends(require_admin)]


def _course_response(course: Course) -> CourseResponse:
    return CourseResponse(
        id=course.id,
        title=course.title,
        description=course.description,
        image_url=course.image_url,
        price=course.price,
        source_url=course.source_url,
        publish_flag=course.publish_flag,
        category_id=course.category_id,
        category=category_response(course.category) if course.category else None,
        create_date=course.create_date.isoformat(),
        update_date=course.update_date.isoformat(),
    )


def _admin_course_response(view: AdminCourseView) -> AdminCourseResponse:
    return AdminCourseResponse(
        **_course_response(view.course).model_dump(),
        chapters=[chapter_response(chapter) for chapter in view.chapters],
        purchase_count=view.purchase_count,
    )


# ── Learner endpoints ────────────────────────────────────────────────────────

@router.get("/publish", response_model=PublishedCourseListResponse)
def list_published_courses(
    current_user: CurrentUser,
    title: str | None = Query(default=None),
    category_id: str | None = Query(default=None),
    db: Session = Depends(get_db),
) -> PublishedCourseListResponse:
    views = course_service.list_published_courses(db, current_user.user_id, title=title, category_id=category_id)
    return PublishedCourseListResponse(
        courses=[
            PublishedCourseResponse(
                **_course_response(view.course).model_dump(),
                chapters=[chapter_response(chapter) for chapter in view.chapters],
                purchased=view.purchased,
            )
            for view in views
        ]
    )


@router.get("/publish/{course_id}", response_model=PublishedCourseDetailResponse)
def get_published_course(course_id: str, current_user: CurrentUser, db: Session = Depends(get_db)) -> PublishedCourseDetailResponse:
    view = course_service.get_published_course(db, course_id, current_user.user_id)
    return PublishedCourseDetailResponse(
        **_course_response(view.course).model_dump(),
        chapters=[chapter_with_video_response(chapter) for chapter in view.chapters],
        purchased=view.purchased,
    )


@router.get("/purchased", response_model=PurchasedCourseListResponse)
def list_purchased_courses(current_user: CurrentUser, db: Session = Depends(get_db)) -> PurchasedCourseListResponse:
    courses = course_service.list_purchased_courses(db, current_user.user_id)
    return PurchasedCourseListResponse(
        courses=[
            PurchasedCourseResponse(
                **_course_response(course).model_dump(),
                chapters=[chapter_response(chapter) for chapter in course.chapters if chapter.publish_flag],
            )
            for course in courses
        ]
    )


@router.post("/{course_id}/checkout", response_model=CheckoutResponse)
def checkout(
    course_id: str,
    current_user: CurrentUser,
    payments: Payments,
    settings: Annotated[Settings, Depends(get_settings)],
    db: Session = Depends(get_db),
) -> CheckoutResponse:
    url = purchase_service.checkout(
        db,
        course_id,
        current_user.user_id,
        current_user.email,
        payments=payments,
        settings=settings,
    )
    return CheckoutResponse(url=url)


@router.post("/{course_id}/checkout/free", response_model=PurchaseResponse, status_code=201)
def checkout_free(course_id: str, current_user: CurrentUser, db: Session = Depends(get_db)) -> PurchaseResponse:
    purchase: Purchase = purchase_service.checkout_free(db, course_id, current_user.user_id)
    return PurchaseResponse(
        id=purchase.id,
        course_id=purchase.course_id,
        user_id=purchase.user_id,
        create_date=purchase.create_date.isoformat(),
    )


# ── Admin endpoints ──────────────────────────────────────────────────────────

@router.get("", response_model=AdminCourseListResponse, dependencies=admin)
def list_courses(db: Session = Depends(get_db)) -> AdminCourseListResponse:
    items = [_admin_course_response(view) for view in course_service.list_admin_courses(db)]
    return AdminCourseListResponse(courses=items, total=len(items))


@router.post("", response_model=CourseResponse, status_code=201, dependencies=admin)
def create_course(payload: CourseCreateRequest, db: Session = Depends(get_db)) -> CourseResponse:
    return _course_response(course_service.create_course(db, payload.title))


@router.get("/{course_id}", response_model=AdminCourseResponse, dependencies=admin)
def get_course(course_id: str, db: Session = Depends(get_db)) -> AdminCourseResponse:
    return _admin_course_response(course_service.get_course(db, course_id))


@router.put("/{course_id}", response_model=CourseResponse, dependencies=admin)
def update_course(course_id: str, payload: CourseUpdateRequest, db: Session = Depends(get_db)) -> CourseResponse:
    changes = payload.model_dump(exclude_unset=True, exclude_none=True, mode="json")
    return _course_response(course_service.update_course(db, course_id, changes))


@router.delete("/{course_id}", response_model=CourseResponse, dependencies=admin)
def delete_course(course_id: str, video: VideoService, db: Session = Depends(get_db)) -> CourseResponse:
    return _course_response(course_service.delete_course(db, course_id, video))


@router.put("/{course_id}/title", response_model=CourseResponse, dependencies=admin)
def update_course_title(course_id: str, payload: CourseTitleUpdateRequest, db: Session = Depends(get_db)) -> CourseResponse:
    return _course_response(course_service.update_course_field(db, course_id, "title", payload.title))


@router.put("/{course_id}/description", response_model=CourseResponse, dependencies=admin)
def update_course_description(
    course_id: str,
    payload: CourseDescriptionUpdateRequest,
    db: Session = Depends(get_db),
) -> CourseResponse:
    return _course_response(course_service.update_course_field(db, course_id, "description", payload.description))


@router.put("/{course_id}/thumbnail", response_model=CourseResponse, dependencies=admin)
def update_course_thumbnail(
    course_id: str,
    payload: CourseThumbnailUpdateRequest,
    db: Session = Depends(get_db),
) -> CourseResponse:
    return _course_response(course_service.update_course_field(db, course_id, "image_url", str(payload.image_url)))


@router.put("/{course_id}/price", response_model=CourseResponse, dependencies=admin)
def update_course_price(course_id: str, payload: CoursePriceUpdateRequest, db: Session = Depends(get_db)) -> CourseResponse:
    return _course_response(course_service.update_course_field(db, course_id, "price", payload.price))


@router.put("/{course_id}/category", response_model=CourseResponse, dependencies=admin)
def update_course_category(
    course_id: str,
    payload: CourseCategoryUpdateRequest,
    db: Session = Depends(get_db),
) -> CourseResponse:
    return _course_response(course_service.update_course_field(db, course_id, "category_id", payload.category_id))


@router.put("/{course_id}/source_url", response_model=CourseResponse, dependencies=admin)
def update_course_source_url(
    course_id: str,
    payload: CourseSourceUrlUpdateRequest,
    db: Session = Depends(get_db),
) -> CourseResponse:
    return _course_response(course_service.update_course_field(db, course_id, "source_url", str(payload.source_url)))


@router.put("/{course_id}/publish", response_model=CourseResponse, dependencies=admin)
def publish_course(course_id: str, db: Session = Depends(get_db)) -> CourseResponse:
    return _course_response(course_service.publish_course(db, course_id))


@router.put("/{course_id}/unpublish", response_model=CourseResponse, dependencies=admin)
def unpublish_course(course_id: str, db: Session = Depends(get_db)) -> CourseResponse:
    return _course_response(course_service.unpublish_course(db, course_id))
