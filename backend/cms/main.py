"""FastAPI 애플리케이션 진입점. 미들웨어, 로깅, API 라우터를 등록합니다."""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from cms.config import settings
from cms.database import Base, engine
import cms.models  # noqa: F401 - 모델 import로 metadata 등록
from cms.routers import auth, contents, content_versions
from cms.utils.logging import init_logging

app = FastAPI(
    title="Agency CMS",
    description="포트폴리오/인사이트/서비스 콘텐츠의 버전 이력과 게시를 관리하는 관리자 API",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register all routers
app.include_router(auth.router)
app.include_router(contents.router)
app.include_router(content_versions.router)


@app.on_event("startup")
def startup():
    init_logging()
    # 신규 기능 배포 시 누락된 테이블을 자동 생성합니다.
    Base.metadata.create_all(bind=engine)


@app.get("/api/health")
def health_check():
    return {"status": "ok", "service": "Agency CMS"}
