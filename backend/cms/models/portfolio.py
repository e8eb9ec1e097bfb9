"""포트폴리오 항목 도메인의 SQLAlchemy 모델 정의입니다."""

from sqlalchemy import Column, Integer, String, Text, Date, DateTime, Boolean, JSON
from sqlalchemy.sql import func
from cms.database import Base


class PortfolioItem(Base):
    __tablename__ = "portfolio_items"

    item_id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(200), nullable=False)
    slug = Column(String(200), unique=True, nullable=False)
    description = Column(Text)
    content = Column(JSON)
    featured_image = Column(String(500))
    gallery = Column(JSON)  # [{url, alt}]
    client = Column(String(200))
    project_date = Column(Date)
    project_url = Column(String(500))
    technologies = Column(JSON)
    is_featured = Column(Boolean, default=False)
    is_published = Column(Boolean, default=False)
    published_at = Column(DateTime)
    sort_order = Column(Integer, default=0)
    views_count = Column(Integer, default=0)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, onupdate=func.now())
