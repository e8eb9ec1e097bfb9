"""콘텐츠 종류별 필드 ⇄ 스냅샷 페이로드 매핑과 종류 태그 레지스트리입니다.

버전 엔진/저장소/비교 로직은 종류를 모른다. 종류별 코드는 이 모듈에만 둔다.
"""

import copy
from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, Optional, Tuple, Type

from pydantic import BaseModel, ValidationError
from sqlalchemy.orm import Session

from cms.database import Base
from cms.models.article import Article
from cms.models.portfolio import PortfolioItem
from cms.models.service import Service
from cms.schemas.content import (
    ArticleCreate, ArticleFields,
    PortfolioItemCreate, PortfolioItemFields,
    ServiceCreate, ServiceFields,
)
from cms.utils.exceptions import ContentValidationError, NotFoundError


@dataclass(frozen=True)
class ContentAdapter:
    kind: str
    model: Type[Base]
    id_attr: str
    versioned_fields: Tuple[str, ...]
    create_schema: Type[BaseModel]
    update_schema: Type[BaseModel]
    aliases: Tuple[str, ...] = ()
    date_fields: Tuple[str, ...] = ()
    supports_drafts: bool = False

    def load(self, db: Session, entity_id: int):
        return db.query(self.model).filter(getattr(self.model, self.id_attr) == entity_id).first()

    def get_or_404(self, db: Session, entity_id: int):
        entity = self.load(db, entity_id)
        if entity is None:
            raise NotFoundError("Content not found")
        return entity

    def entity_id(self, entity) -> int:
        return int(getattr(entity, self.id_attr))

    def fields(self, entity) -> Dict[str, Any]:
        """Versioned fields of the live entity as an independent JSON-ready payload."""
        payload = {}
        for name in self.versioned_fields:
            value = getattr(entity, name)
            if name in self.date_fields and isinstance(value, date):
                value = value.isoformat()
            payload[name] = copy.deepcopy(value)
        return payload

    def apply(self, entity, payload: Dict[str, Any]) -> None:
        for name in self.versioned_fields:
            if name not in payload:
                continue
            value = copy.deepcopy(payload[name])
            if name in self.date_fields and isinstance(value, str):
                value = date.fromisoformat(value)
            setattr(entity, name, value)

    def validate(self, data: Any, *, creating: bool = False) -> Dict[str, Any]:
        """Check submitted fields; ``creating`` switches to the schema that requires title and slug."""
        if not isinstance(data, dict):
            raise ContentValidationError("Content data must be an object")
        schema = self.create_schema if creating else self.update_schema
        try:
            parsed = schema.model_validate(data)
        except ValidationError as exc:
            raise ContentValidationError(exc.errors(include_url=False, include_context=False)) from exc
        return parsed.model_dump(mode="json", exclude_unset=True)


ARTICLE = ContentAdapter(
    kind="insight",
    model=Article,
    id_attr="article_id",
    versioned_fields=(
        "title", "slug", "excerpt", "content", "featured_image", "featured_image_alt",
        "category", "tags", "reading_time", "is_featured",
    ),
    create_schema=ArticleCreate,
    update_schema=ArticleFields,
    aliases=("insights", "article", "articles"),
    supports_drafts=True,
)

PORTFOLIO_ITEM = ContentAdapter(
    kind="portfolio",
    model=PortfolioItem,
    id_attr="item_id",
    versioned_fields=(
        "title", "slug", "description", "content", "featured_image", "gallery", "client",
        "project_date", "project_url", "technologies", "is_featured", "sort_order",
    ),
    create_schema=PortfolioItemCreate,
    update_schema=PortfolioItemFields,
    aliases=("portfolio-item", "portfolio-items"),
    date_fields=("project_date",),
)

SERVICE = ContentAdapter(
    kind="service",
    model=Service,
    id_attr="service_id",
    versioned_fields=(
        "title", "slug", "description", "content", "icon", "featured_image",
        "price_range", "is_featured", "sort_order",
    ),
    create_schema=ServiceCreate,
    update_schema=ServiceFields,
    aliases=("services",),
)

ADAPTERS = (ARTICLE, PORTFOLIO_ITEM, SERVICE)

_REGISTRY: Dict[str, ContentAdapter] = {}
for _adapter in ADAPTERS:
    for _tag in (_adapter.kind, *_adapter.aliases):
        _REGISTRY[_tag] = _adapter


def find_adapter(content_type: str) -> Optional[ContentAdapter]:
    return _REGISTRY.get(str(content_type or "").strip().lower())


def resolve_adapter(content_type: str) -> ContentAdapter:
    adapter = find_adapter(content_type)
    if adapter is None:
        raise NotFoundError("Content not found")
    return adapter
