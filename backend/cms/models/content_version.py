"""콘텐츠 버전 스냅샷과 엔티티별 리비전 카운터 SQLAlchemy 모델 정의입니다."""

from sqlalchemy import (
    Column, Integer, String, Text, DateTime, Boolean, JSON, ForeignKey, Index, UniqueConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from cms.database import Base


class ContentVersion(Base):
    __tablename__ = "content_version"

    version_id = Column(Integer, primary_key=True, autoincrement=True)
    entity_type = Column(String(30), nullable=False)  # insight/portfolio/service
    entity_id = Column(Integer, nullable=False)
    version_number = Column(Integer, nullable=False)
    payload = Column(JSON, nullable=False)
    author_id = Column(Integer, ForeignKey("users.user_id", ondelete="SET NULL"), nullable=True)
    change_summary = Column(String(255))
    change_notes = Column(Text)
    is_current = Column(Boolean, nullable=False, default=False)
    is_published = Column(Boolean, nullable=False, default=False)
    published_at = Column(DateTime)
    created_at = Column(DateTime, server_default=func.now(), nullable=False)

    author = relationship("User", back_populates="content_versions")

    __table_args__ = (
        UniqueConstraint("entity_type", "entity_id", "version_number", name="uq_content_version_number"),
        Index("idx_content_version_current", "entity_type", "entity_id", "is_current"),
        Index("idx_content_version_published", "entity_type", "entity_id", "is_published"),
        Index("idx_content_version_created", "created_at"),
    )


class ContentVersionCounter(Base):
    __tablename__ = "content_version_counter"

    entity_type = Column(String(30), primary_key=True)
    entity_id = Column(Integer, primary_key=True)
    last_version_number = Column(Integer, nullable=False, default=0)
    revision = Column(Integer, nullable=False, default=0)  # 모든 쓰기 작업마다 CAS로 증가
