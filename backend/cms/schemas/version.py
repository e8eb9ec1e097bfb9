"""콘텐츠 버전 이력 요청/응답 계약을 위한 Pydantic 스키마입니다."""

from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field


class AuthorOut(BaseModel):
    user_id: int
    name: str
    email: str


class ContentVersionOut(BaseModel):
    version_id: int
    entity_type: str
    entity_id: int
    version_number: int
    author: Optional[AuthorOut] = None
    change_summary: str
    change_notes: Optional[str] = None
    is_current: bool
    is_published: bool
    created_at: datetime
    published_at: Optional[datetime] = None


class ContentVersionDetail(ContentVersionOut):
    payload: Dict[str, Any]


class VersionHistoryOut(BaseModel):
    versions: List[ContentVersionOut]
    total: int


class VersionDetailOut(BaseModel):
    version: ContentVersionDetail


class VersionSummaryOut(BaseModel):
    version_number: int
    author: Optional[AuthorOut] = None
    created_at: datetime
    change_summary: str


class FieldDifference(BaseModel):
    field: str
    old_value: Any = None
    new_value: Any = None
    type: Literal["added", "modified", "removed"]


class VersionCompareOut(BaseModel):
    version1: VersionSummaryOut
    version2: VersionSummaryOut
    differences: List[FieldDifference]


class RestoreRequest(BaseModel):
    version_number: int = Field(..., ge=1)
    notes: Optional[str] = Field(None, max_length=1000)


class PublishRequest(BaseModel):
    version_number: int = Field(..., ge=1)


class DraftCreate(BaseModel):
    data: Dict[str, Any]
    change_notes: Optional[str] = Field(None, max_length=1000)


class RestoreResult(BaseModel):
    message: str
    current_version: ContentVersionDetail


class PublishResult(BaseModel):
    message: str
    published_version: ContentVersionDetail


class DraftResult(BaseModel):
    message: str
    draft: ContentVersionDetail


class MessageOut(BaseModel):
    message: str
