"""User 요청/응답 계약을 위한 Pydantic 스키마입니다."""

from pydantic import BaseModel


class UserOut(BaseModel):
    user_id: int
    email: str
    name: str
    role: str
    is_active: bool

    model_config = {"from_attributes": True}


class LoginRequest(BaseModel):
    email: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int
    user: UserOut
