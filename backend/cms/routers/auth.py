"""Auth 기능 API 라우터입니다. 버전 작성자(author) 기록에 쓰이는 토큰을 발급합니다."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from cms.database import get_db
from cms.schemas.user import LoginRequest, TokenResponse, UserOut
from cms.services.auth_service import create_access_token, mock_sso_login
from cms.middleware.auth_middleware import get_current_user
from cms.models.user import User

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/login", response_model=TokenResponse)
def login(request: LoginRequest, db: Session = Depends(get_db)):
    user = mock_sso_login(db, request.email)
    token, expires_in = create_access_token(user)
    return TokenResponse(access_token=token, expires_in=expires_in, user=UserOut.model_validate(user))


@router.get("/me", response_model=UserOut)
def me(current_user: User = Depends(get_current_user)):
    return current_user
