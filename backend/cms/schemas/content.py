"""콘텐츠(인사이트/포트폴리오/서비스) 요청/응답 계약을 위한 Pydantic 스키마입니다."""

from datetime import date, datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ArticleFields(BaseModel):
    model_config = ConfigDict(extra="forbid")

    title: Optional[str] = Field(None, min_length=1, max_length=200)
    slug: Optional[str] = Field(None, min_length=1, max_length=200)
    excerpt: Optional[str] = None
    content: Optional[Any] = None
    featured_image: Optional[str] = Field(None, max_length=500)
    featured_image_alt: Optional[str] = Field(None, max_length=200)
    category: Optional[str] = Field(None, max_length=100)
    tags: Optional[List[str]] = None
    reading_time: Optional[int] = Field(None, ge=0)
    is_featured: Optional[bool] = None


class ArticleCreate(ArticleFields):
    title: str = Field(..., min_length=1, max_length=200)
    slug: str = Field(..., min_length=1, max_length=200)


class PortfolioItemFields(BaseModel):
    model_config = ConfigDict(extra="forbid")

    title: Optional[str] = Field(None, min_length=1, max_length=200)
    slug: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    content: Optional[Any] = None
    featured_image: Optional[str] = Field(None, max_length=500)
    gallery: Optional[List[Dict[str, Any]]] = None
    client: Optional[str] = Field(None, max_length=200)
    project_date: Optional[date] = None
    project_url: Optional[str] = Field(None, max_length=500)
    technologies: Optional[List[str]] = None
    is_featured: Optional[bool] = None
    sort_order: Optional[int] = None


class PortfolioItemCreate(PortfolioItemFields):
    title: str = Field(..., min_length=1, max_length=200)
    slug: str = Field(..., min_length=1, max_length=200)


class ServiceFields(BaseModel):
    model_config = ConfigDict(extra="forbid")

    title: Optional[str] = Field(None, min_length=1, max_length=200)
    slug: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    content: Optional[Any] = None
    icon: Optional[str] = Field(None, max_length=100)
    featured_image: Optional[str] = Field(None, max_length=500)
    price_range: Optional[str] = Field(None, max_length=100)
    is_featured: Optional[bool] = None
    sort_order: Optional[int] = None


class ServiceCreate(ServiceFields):
    title: str = Field(..., min_length=1, max_length=200)
    slug: str = Field(..., min_length=1, max_length=200)


class ContentWrite(BaseModel):
    data: Dict[str, Any]
    change_summary: Optional[str] = Field(None, max_length=255)
    change_notes: Optional[str] = Field(None, max_length=1000)


class ContentOut(BaseModel):
    content_type: str
    content_id: int
    data: Dict[str, Any]
    is_published: bool
    published_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
