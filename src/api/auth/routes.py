"""
Auth API routes.

Defines REST endpoints for account registration, verification, login,
password reset and profile management. Handlers run in FastAPI's thread
pool because bcrypt and psycopg calls block.

Domain failures propagate as AccountError and are mapped to status codes
by src.api.errors.
"""

from fastapi import APIRouter, Depends, Query, status

from src.api.dependencies import get_account_service, get_current_account_id
from src.api.models import (
    ChangePasswordRequest,
    EmailRequest,
    ErrorResponse,
    LoginRequest,
    LoginResponse,
    MessageResponse,
    RegisterRequest,
    ResetPasswordRequest,
    UpdateProfileRequest,
    UpdateProfileResponse,
    UserResponse,
)
from src.domain import messages
from src.domain.lifecycle import AccountLifecycleService

router = APIRouter(tags=["auth"])

_VALIDATION = {400: {"model": ErrorResponse, "description": "Validation error"}}
_UNAUTHORIZED = {401: {"model": ErrorResponse, "description": "Not authorized"}}
_NOT_FOUND = {404: {"model": ErrorResponse, "description": "User not found"}}


@router.post(
    "/register",
    response_model=MessageResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        **_VALIDATION,
        409: {"model": ErrorResponse, "description": "Email already in use"},
    },
    summary="Register a new user",
    description="Create an unverified account. A verification link is emailed "
    "to the provided address.",
)
def register(
    request_data: RegisterRequest,
    service: AccountLifecycleService = Depends(get_account_service),
) -> MessageResponse:
    """
    Register a new user and send a verification link.

    - **firstName**: Required first name
    - **lastName**: Optional last name
    - **email**: Valid email address to register
    - **password**: Password (minimum 6 characters)
    """
    service.register(
        request_data.first_name,
        request_data.last_name,
        request_data.email,
        request_data.password,
    )
    return MessageResponse(message=messages.USER_REGISTERED)


@router.post(
    "/resend-verification",
    response_model=MessageResponse,
    responses={**_VALIDATION, **_NOT_FOUND},
    summary="Resend the verification email",
)
def resend_verification(
    request_data: EmailRequest,
    service: AccountLifecycleService = Depends(get_account_service),
) -> MessageResponse:
    service.resend_verification(request_data.email)
    return MessageResponse(message=messages.VERIFICATION_EMAIL_SENT)


@router.get(
    "/verify-email",
    response_model=MessageResponse,
    responses={**_VALIDATION, **_UNAUTHORIZED},
    summary="Verify an email address",
    description="Consume the token from the verification link.",
)
def verify_email(
    token: str = Query(..., min_length=1),
    service: AccountLifecycleService = Depends(get_account_service),
) -> MessageResponse:
    service.verify_email(token)
    return MessageResponse(message=messages.EMAIL_VERIFIED)


@router.post(
    "/login",
    response_model=LoginResponse,
    responses={**_VALIDATION, **_UNAUTHORIZED},
    summary="Log in",
    description="Exchange email and password for a session token. Five consecutive "
    "failures lock the account for 30 minutes.",
)
def login(
    request_data: LoginRequest,
    service: AccountLifecycleService = Depends(get_account_service),
) -> LoginResponse:
    result = service.login(request_data.email, request_data.password)
    return LoginResponse(token=result.token, user=UserResponse.from_account(result.account))


@router.post(
    "/forgot-password",
    response_model=MessageResponse,
    responses={**_VALIDATION, **_NOT_FOUND},
    summary="Request a password reset link",
)
def forgot_password(
    request_data: EmailRequest,
    service: AccountLifecycleService = Depends(get_account_service),
) -> MessageResponse:
    service.request_password_reset(request_data.email)
    return MessageResponse(message=messages.PASSWORD_RESET_SENT)


@router.post(
    "/reset-password",
    response_model=MessageResponse,
    responses={**_VALIDATION, **_UNAUTHORIZED},
    summary="Reset the password with a one-time token",
)
def reset_password(
    request_data: ResetPasswordRequest,
    token: str = Query(..., min_length=1),
    service: AccountLifecycleService = Depends(get_account_service),
) -> MessageResponse:
    service.reset_password(token, request_data.new_password)
    return MessageResponse(message=messages.PASSWORD_RESET_SUCCESS)


@router.put(
    "/change-password",
    response_model=MessageResponse,
    responses={**_VALIDATION, **_UNAUTHORIZED, **_NOT_FOUND},
    summary="Change the password of the logged-in user",
)
def change_password(
    request_data: ChangePasswordRequest,
    account_id: str = Depends(get_current_account_id),
    service: AccountLifecycleService = Depends(get_account_service),
) -> MessageResponse:
    service.change_password(
        account_id, request_data.current_password, request_data.new_password
    )
    return MessageResponse(message=messages.PASSWORD_CHANGED)


@router.put(
    "/update",
    response_model=UpdateProfileResponse,
    responses={
        **_VALIDATION,
        **_UNAUTHORIZED,
        **_NOT_FOUND,
        409: {"model": ErrorResponse, "description": "Email already in use"},
    },
    summary="Update the profile of the logged-in user",
)
def update_profile(
    request_data: UpdateProfileRequest,
    account_id: str = Depends(get_current_account_id),
    service: AccountLifecycleService = Depends(get_account_service),
) -> UpdateProfileResponse:
    account = service.update_profile(
        account_id,
        first_name=request_data.first_name,
        last_name=request_data.last_name,
        email=request_data.email,
        password=request_data.password,
    )
    return UpdateProfileResponse(
        message=messages.USER_UPDATED, user=UserResponse.from_account(account)
    )
