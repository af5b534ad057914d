from pydantic import BaseModel, Field, field_validator

ALLOWED_NAME_PUNCTUATION = "-_.,"


class CategoryNameRequest(BaseModel):
    name: str = Field(min_length=1, max_length=100)

    @field_validator("name")
    @classmethod
    def _check_characters(cls, value: str) -> str:
        if not all(ch.isalnum() or ch.isspace() or ch in ALLOWED_NAME_PUNCTUATION for ch in value):
            raise ValueError("Category name contains invalid characters")
        return value


class CategoryResponse(BaseModel):
    id: str
    name: str


class CategoryListResponse(BaseModel):
    categories: list[CategoryResponse]
