"""Registration, login, and current-user endpoints."""
from fastapi import APIRouter, Depends, status

from api.dependencies import get_current_user, get_settings, get_user_service
from core.auth import create_access_token
from core.config import Settings
from models.user import User
from schemas.user import TokenResponse, UserLogin, UserRegister, UserResponse
from services.user_service import UserService

router = APIRouter(prefix="/auth", tags=["auth"])


def _token_response(user: User, settings: Settings) -> TokenResponse:
    return TokenResponse(
        access_token=create_access_token(user.id, settings),
        expires_in=settings.jwt_expires_minutes * 60,
        user=UserResponse.model_validate(user),
    )


@router.post("/register", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
async def register(
    data: UserRegister,
    service: UserService = Depends(get_user_service),
    settings: Settings = Depends(get_settings),
) -> TokenResponse:
    """
    Create an account and return an access token for it.

    Returns 409 if the email is already registered.
    """
    user = await service.register(data)
    return _token_response(user, settings)


@router.post("/login", response_model=TokenResponse)
async def login(
    data: UserLogin,
    service: UserService = Depends(get_user_service),
    settings: Settings = Depends(get_settings),
) -> TokenResponse:
    """
    Exchange email and password for an access token.

    Returns 401 for an unknown email or a wrong password alike.
    """
    user = await service.authenticate(data.email, data.password)
    return _token_response(user, settings)


@router.get("/me", response_model=UserResponse)
async def get_me(current_user: User = Depends(get_current_user)) -> UserResponse:
    """Get the authenticated user."""
    return UserResponse.model_validate(current_user)
