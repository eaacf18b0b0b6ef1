"""Credential check endpoint."""

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from scolarite.api.dependencies import UserServiceDep
from scolarite.api.models import APIResponse, LoginRequest, UserResponse, user_to_response

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post(
    "/login",
    response_model=APIResponse[UserResponse],
    responses={status.HTTP_401_UNAUTHORIZED: {"model": APIResponse[None]}},
)
def login(
    credentials: LoginRequest, service: UserServiceDep
) -> APIResponse[UserResponse] | JSONResponse:
    """Check a username/password pair and return the matching account."""
    user = service.verify_credentials(credentials.username, credentials.password)
    if user is None:
        return JSONResponse(
            status_code=status.HTTP_401_UNAUTHORIZED,
            content=APIResponse[None](data=None, error="Invalid username or password").model_dump(),
        )
    return APIResponse(data=user_to_response(user))
