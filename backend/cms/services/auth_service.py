"""작성자 식별용 토큰 발급과 모의 SSO 로그인을 담당하는 서비스입니다. 권한 판정은 하지 않습니다."""

from datetime import datetime, timedelta
from typing import Tuple

from jose import jwt
from sqlalchemy.orm import Session
from fastapi import HTTPException, status
from cms.models.user import User
from cms.config import settings

ALGORITHM = "HS256"


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def create_access_token(user: User) -> Tuple[str, int]:
    """Returns the encoded token and its lifetime in seconds."""
    lifetime = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    payload = {
        "sub": str(user.user_id),
        "email": user.email,
        "role": user.role,
        "exp": datetime.utcnow() + lifetime,
    }
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=ALGORITHM), int(lifetime.total_seconds())


def mock_sso_login(db: Session, email: str) -> User:
    user = (
        db.query(User)
        .filter(User.email == normalize_email(email), User.is_active == True)  # noqa: E712
        .first()
    )
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="No active account for this email",
        )
    return user
