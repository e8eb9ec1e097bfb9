"""콘텐츠 버전 관리에서 사용하는 예외 계층입니다."""

from fastapi import HTTPException, status


class NotFoundError(HTTPException):
    """
    Raised when a content item or one of its versions does not exist.
    Returns HTTP 404.
    """

    def __init__(self, detail: str = "Content not found"):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class VersionNotFoundError(NotFoundError):
    def __init__(self, detail: str = "Version not found"):
        super().__init__(detail=detail)


class UnsupportedOperationError(HTTPException):
    """
    Raised when an operation is not available for a content type,
    e.g. drafts on a type that does not support them. Returns HTTP 400.
    """

    def __init__(self, detail: str):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class ContentValidationError(HTTPException):
    """
    Raised when a payload is rejected before anything is written.
    Returns HTTP 422.
    """

    def __init__(self, detail):
        super().__init__(status_code=422, detail=detail)


class SlugConflictError(HTTPException):
    """
    Raised when a save or restore would give two items of one type the same slug.
    Returns HTTP 409.
    """

    def __init__(self, detail: str = "Slug is already in use"):
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail)


class ConcurrentModificationError(HTTPException):
    """
    Raised when version writes keep conflicting after all retries.
    Returns HTTP 503 so the caller can try again.
    """

    def __init__(self, detail: str = "Content is being modified concurrently, please retry"):
        super().__init__(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=detail)


class VersionConflict(Exception):
    """Per-entity revision check failed; another writer committed first."""

    def __init__(self, entity_type: str, entity_id: int):
        super().__init__(f"revision conflict on {entity_type}#{entity_id}")
        self.entity_type = entity_type
        self.entity_id = entity_id
