from app.core.error_codes import DEFAULT_MESSAGES, ErrorCode, status_for


class ApiError(Exception):
    def __init__(self, code: ErrorCode, message: str | None = None):
        self.code = ErrorCode(code)
        self.message = message or DEFAULT_MESSAGES[self.code]
        super().__init__(self.message)

    @property
    def status_code(self) -> int:
        return status_for(self.code)
