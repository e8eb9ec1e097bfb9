"""SQLAlchemy 모델 패키지 초기화 모듈입니다."""

from cms.models.user import User
from cms.models.article import Article
from cms.models.portfolio import PortfolioItem
from cms.models.service import Service
from cms.models.content_version import ContentVersion, ContentVersionCounter

__all__ = [
    "User",
    "Article",
    "PortfolioItem",
    "Service",
    "ContentVersion", "ContentVersionCounter",
]
