"""
API v1 routes.

Defines the REST endpoints over the account service. Routes are plain
`def` functions so password hashing runs in FastAPI's threadpool instead
of blocking the event loop.
"""

import logging
from dataclasses import asdict

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import JSONResponse

from accounts.api.dependencies import get_account_service
from accounts.api.models import (
    CredentialsRequest,
    ErrorResponse,
    LoginResponse,
    MessageResponse,
    ValidationErrorResponse,
)
from accounts.domain.exceptions import (
    InvalidCredentials,
    InvalidToken,
    NewUserErrors,
    VerificationCleanupError,
)
from accounts.domain.users import AccountService, make_new_user

logger = logging.getLogger(__name__)

router = APIRouter(tags=["v1"])


@router.post(
    "/register",
    response_model=MessageResponse,
    status_code=status.HTTP_202_ACCEPTED,
    responses={
        422: {"model": ValidationErrorResponse, "description": "Validation error"},
        500: {"model": ErrorResponse, "description": "Internal error"},
    },
    summary="Register a new user",
    description="Submit email and password to begin registration. "
    "A verification link will be sent to the provided email.",
)
def register(
    request_data: CredentialsRequest,
    service: AccountService = Depends(get_account_service),
) -> MessageResponse | JSONResponse:
    """
    Register a new user and send a verification link.

    The response is identical whether or not the email already belongs
    to a verified account.
    """
    try:
        new_user = make_new_user(request_data.email, request_data.password)
    except NewUserErrors as e:
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={
                "detail": {
                    "email": [asdict(err) for err in e.email],
                    "password": [asdict(err) for err in e.password],
                }
            },
        )

    service.register(new_user)
    return MessageResponse(message="Check your email to verify your account")


@router.post(
    "/login",
    response_model=LoginResponse,
    responses={
        401: {"model": ErrorResponse, "description": "Invalid credentials"},
        500: {"model": ErrorResponse, "description": "Internal error"},
    },
    summary="Check credentials",
)
def login(
    request_data: CredentialsRequest,
    service: AccountService = Depends(get_account_service),
) -> LoginResponse:
    """Return the user id for a verified email/password pair."""
    try:
        user = service.authenticate(request_data.email, request_data.password)
    except InvalidCredentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
        ) from None
    return LoginResponse(user_id=user.id)


def _consume_token(token: str, service: AccountService) -> MessageResponse:
    try:
        service.verify_email(token)
    except InvalidToken:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid or expired verification token",
        ) from None
    except VerificationCleanupError:
        # The verification itself committed.
        logger.error("Email verified but the used key was not deleted.", exc_info=True)
    return MessageResponse(message="Email verified")


_VERIFY_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Invalid or expired token"},
    500: {"model": ErrorResponse, "description": "Internal error"},
}


@router.post(
    "/verify-email/{token}",
    response_model=MessageResponse,
    responses=_VERIFY_RESPONSES,
    summary="Verify an email address",
)
def verify_email(
    token: str,
    service: AccountService = Depends(get_account_service),
) -> MessageResponse:
    """Consume a verification token."""
    return _consume_token(token, service)


@router.get(
    "/verify-email/{token}",
    response_model=MessageResponse,
    responses=_VERIFY_RESPONSES,
    summary="Follow an emailed verification link",
)
def follow_verification_link(
    token: str,
    service: AccountService = Depends(get_account_service),
) -> MessageResponse:
    """Target of the link in the verification email."""
    return _consume_token(token, service)
