from pydantic import BaseModel, ConfigDict, Field, HttpUrl


class TextRequest(BaseModel):
    """Strips surrounding whitespace before length checks, so blank text is rejected."""

    model_config = ConfigDict(str_strip_whitespace=True)


class ChapterCreateRequest(TextRequest):
    title: str = Field(min_length=1, max_length=100)


class ChapterUpdateRequest(TextRequest):
    title: str | None = Field(default=None, min_length=1, max_length=100)
    description: str | None = Field(default=None, min_length=1, max_length=1000)


class ChapterTitleUpdateRequest(TextRequest):
    title: str = Field(min_length=1, max_length=100)


class ChapterDescriptionUpdateRequest(TextRequest):
    description: str = Field(min_length=1, max_length=1000)


class ChapterVideoUpdateRequest(BaseModel):
    video_url: HttpUrl


class ChapterPositionItem(BaseModel):
    id: str = Field(min_length=1)
    position: int = Field(ge=1)


class ChapterReorderRequest(BaseModel):
    chapters: list[ChapterPositionItem] = Field(min_length=1)


class VideoAssetResponse(BaseModel):
    id: str
    asset_id: str
    playback_id: str | None
    chapter_id: str


class ChapterResponse(BaseModel):
    id: str
    course_id: str
    title: str
    description: str | None
    video_url: str | None
    position: int
    publish_flag: bool
    create_date: str
    update_date: str


class ChapterWithVideoResponse(ChapterResponse):
    video_asset: VideoAssetResponse | None = None


class ChapterListResponse(BaseModel):
    chapters: list[ChapterResponse]
