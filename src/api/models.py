"""
API request and response models.

Pydantic models for FastAPI endpoint validation and OpenAPI schema generation.
Field names on the wire are camelCase (firstName, newPassword, ...).
"""

from typing import Annotated

from pydantic import BaseModel, ConfigDict, EmailStr, Field, StringConstraints

from src.domain.account import Account

Name = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]
Password = Annotated[str, Field(min_length=6, description="Password (min 6 characters)")]


class CamelModel(BaseModel):
    """Base model accepting camelCase aliases or snake_case names."""

    model_config = ConfigDict(populate_by_name=True)


class RegisterRequest(CamelModel):
    """Request model for user registration."""

    first_name: Name = Field(..., alias="firstName")
    last_name: Name | None = Field(None, alias="lastName")
    email: EmailStr
    password: Password


class EmailRequest(CamelModel):
    """Request model carrying only an email (resend verification, forgot password)."""

    email: EmailStr


class LoginRequest(CamelModel):
    """Request model for login."""

    email: EmailStr
    password: str = Field(..., min_length=1)


class ResetPasswordRequest(CamelModel):
    """Request model for completing a password reset."""

    new_password: Password = Field(..., alias="newPassword")


class ChangePasswordRequest(CamelModel):
    """Request model for an authenticated password change."""

    current_password: str = Field(..., min_length=1, alias="currentPassword")
    new_password: Password = Field(..., alias="newPassword")


class UpdateProfileRequest(CamelModel):
    """Request model for a partial profile update. Omitted fields are unchanged."""

    first_name: Name | None = Field(None, alias="firstName")
    last_name: Name | None = Field(None, alias="lastName")
    email: EmailStr | None = None
    password: Password | None = None


class UserResponse(CamelModel):
    """Public profile. Never carries credentials or security state."""

    first_name: str = Field(..., alias="firstName")
    last_name: str | None = Field(None, alias="lastName")
    email: str

    @classmethod
    def from_account(cls, account: Account) -> "UserResponse":
        return cls(
            first_name=account.first_name,
            last_name=account.last_name,
            email=account.email,
        )


class MessageResponse(BaseModel):
    """Response model for operations that only report success."""

    status: str = "success"
    message: str


class LoginResponse(BaseModel):
    """Response model for successful login."""

    token: str
    user: UserResponse


class UpdateProfileResponse(BaseModel):
    """Response model for a profile update."""

    message: str
    user: UserResponse


class ErrorResponse(BaseModel):
    """Standard error response model."""

    detail: str
