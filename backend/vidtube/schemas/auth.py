from pydantic import model_validator

from vidtube.schemas.common import CamelModel
from vidtube.schemas.user import UserResponse


class LoginRequest(CamelModel):
    username: str | None = None
    email: str | None = None
    password: str

    @model_validator(mode="after")
    def require_identifier(self):
        if not (self.username or self.email):
            raise ValueError("username or email is required")
        return self


class RefreshTokenRequest(CamelModel):
    refresh_token: str | None = None


class ChangePasswordRequest(CamelModel):
    old_password: str
    new_password: str


class TokenPair(CamelModel):
    access_token: str
    refresh_token: str


class LoginResponse(TokenPair):
    user: UserResponse
