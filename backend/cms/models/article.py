"""인사이트(블로그 글) 도메인의 SQLAlchemy 모델 정의입니다."""

from sqlalchemy import Column, Integer, String, Text, DateTime, Boolean, JSON
from sqlalchemy.sql import func
from cms.database import Base


class Article(Base):
    __tablename__ = "articles"

    article_id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(200), nullable=False)
    slug = Column(String(200), unique=True, nullable=False)
    excerpt = Column(Text)
    content = Column(JSON)  # page-builder block JSON
    featured_image = Column(String(500))
    featured_image_alt = Column(String(200))
    category = Column(String(100))
    tags = Column(JSON)  # ["design", "seo"]
    reading_time = Column(Integer)
    is_featured = Column(Boolean, default=False)
    is_published = Column(Boolean, default=False)
    published_at = Column(DateTime)
    views_count = Column(Integer, default=0)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, onupdate=func.now())
