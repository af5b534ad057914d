from pydantic import BaseModel, Field, HttpUrl

from app.schemas.categories import CategoryResponse
from app.schemas.chapters import ChapterResponse, ChapterWithVideoResponse, TextRequest

MAX_PRICE = 1_000_000


class CourseCreateRequest(TextRequest):
    title: str = Field(min_length=1, max_length=100)


class CourseTitleUpdateRequest(TextRequest):
    title: str = Field(min_length=1, max_length=100)


class CourseDescriptionUpdateRequest(TextRequest):
    description: str = Field(min_length=1, max_length=1000)


class CourseThumbnailUpdateRequest(BaseModel):
    image_url: HttpUrl


class CoursePriceUpdateRequest(BaseModel):
    price: int = Field(ge=0, le=MAX_PRICE)


class CourseCategoryUpdateRequest(TextRequest):
    category_id: str = Field(min_length=1)


class CourseSourceUrlUpdateRequest(BaseModel):
    source_url: HttpUrl


class CourseUpdateRequest(TextRequest):
    title: str | None = Field(default=None, min_length=1, max_length=100)
    description: str | None = Field(default=None, min_length=1, max_length=1000)
    image_url: HttpUrl | None = None
    price: int | None = Field(default=None, ge=0, le=MAX_PRICE)
    category_id: str | None = Field(default=None, min_length=1)
    source_url: HttpUrl | None = None


class CourseResponse(BaseModel):
    id: str
    title: str
    description: str | None
    image_url: str | None
    price: int | None
    source_url: str | None
    publish_flag: bool
    category_id: str | None
    category: CategoryResponse | None = None
    create_date: str
    update_date: str


class AdminCourseResponse(CourseResponse):
    chapters: list[ChapterResponse]
    purchase_count: int


class AdminCourseListResponse(BaseModel):
    courses: list[AdminCourseResponse]
    total: int


class PublishedCourseResponse(CourseResponse):
    chapters: list[ChapterResponse]
    purchased: bool


class PublishedCourseListResponse(BaseModel):
    courses: list[PublishedCourseResponse]


class PublishedCourseDetailResponse(CourseResponse):
    chapters: list[ChapterWithVideoResponse]
    purchased: bool


class PurchasedCourseResponse(CourseResponse):
    chapters: list[ChapterResponse]


class PurchasedCourseListResponse(BaseModel):
    courses: list[PurchasedCourseResponse]


class CheckoutResponse(BaseModel):
    url: str


class PurchaseResponse(BaseModel):
    id: str
    course_id: str
    user_id: str
    create_date: str
