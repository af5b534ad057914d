from enum import Enum


class ErrorCode(str, Enum):
    UNAUTHENTICATED = "UNAUTHENTICATED"
    UNAUTHORIZED = "UNAUTHORIZED"

    COURSE_NOT_FOUND = "COURSE_NOT_FOUND"
    CHAPTER_NOT_FOUND = "CHAPTER_NOT_FOUND"
    CATEGORY_NOT_FOUND = "CATEGORY_NOT_FOUND"
    MUX_DATA_NOT_FOUND = "MUX_DATA_NOT_FOUND"

    COURSE_REQUIRED_FIELDS_EMPTY = "COURSE_REQUIRED_FIELDS_EMPTY"
    CHAPTER_REQUIRED_FIELDS_EMPTY = "CHAPTER_REQUIRED_FIELDS_EMPTY"
    PURCHASE_ALREADY_EXISTS = "PURCHASE_ALREADY_EXISTS"
    COURSE_NOT_FREE = "COURSE_NOT_FREE"
    CHAPTER_POSITIONS_INVALID = "CHAPTER_POSITIONS_INVALID"
    WEBHOOK_SIGNATURE_INVALID = "WEBHOOK_SIGNATURE_INVALID"

    VIDEO_HOST_FAILED = "VIDEO_HOST_FAILED"
    PAYMENT_PROVIDER_FAILED = "PAYMENT_PROVIDER_FAILED"
    PERSISTENCE_FAILED = "PERSISTENCE_FAILED"
    WEBHOOK_PROCESSING_FAILED = "WEBHOOK_PROCESSING_FAILED"
    INTERNAL_ERROR = "INTERNAL_ERROR"


STATUS_BY_CODE: dict[ErrorCode, int] = {
    ErrorCode.UNAUTHENTICATED: 401,
    ErrorCode.UNAUTHORIZED: 401,
    ErrorCode.COURSE_NOT_FOUND: 404,
    ErrorCode.CHAPTER_NOT_FOUND: 404,
    ErrorCode.CATEGORY_NOT_FOUND: 404,
    ErrorCode.MUX_DATA_NOT_FOUND: 404,
    ErrorCode.COURSE_REQUIRED_FIELDS_EMPTY: 400,
    ErrorCode.CHAPTER_REQUIRED_FIELDS_EMPTY: 400,
    ErrorCode.PURCHASE_ALREADY_EXISTS: 400,
    ErrorCode.COURSE_NOT_FREE: 400,
    ErrorCode.CHAPTER_POSITIONS_INVALID: 400,
    ErrorCode.WEBHOOK_SIGNATURE_INVALID: 400,
}

DEFAULT_MESSAGES: dict[ErrorCode, str] = {
    ErrorCode.UNAUTHENTICATED: "Not authenticated",
    ErrorCode.UNAUTHORIZED: "Not an administrator",
    ErrorCode.COURSE_NOT_FOUND: "Course not found",
    ErrorCode.CHAPTER_NOT_FOUND: "Chapter not found",
    ErrorCode.CATEGORY_NOT_FOUND: "Category not found",
    ErrorCode.MUX_DATA_NOT_FOUND: "Video asset not found",
    ErrorCode.COURSE_REQUIRED_FIELDS_EMPTY: "Required course fields are empty",
    ErrorCode.CHAPTER_REQUIRED_FIELDS_EMPTY: "Required chapter fields are empty",
    ErrorCode.PURCHASE_ALREADY_EXISTS: "Course already purchased",
    ErrorCode.COURSE_NOT_FREE: "Course is not free",
    ErrorCode.CHAPTER_POSITIONS_INVALID: "Chapter positions must be 1..N without gaps or duplicates",
    ErrorCode.WEBHOOK_SIGNATURE_INVALID: "Invalid webhook signature",
    ErrorCode.VIDEO_HOST_FAILED: "Video hosting request failed",
    ErrorCode.PAYMENT_PROVIDER_FAILED: "Payment provider request failed",
    ErrorCode.PERSISTENCE_FAILED: "Persistence failure",
    ErrorCode.WEBHOOK_PROCESSING_FAILED: "Event processing error",
    ErrorCode.INTERNAL_ERROR: "Internal server error",
}


def status_for(code: ErrorCode) -> int:
    return STATUS_BY_CODE.get(code, 500)
