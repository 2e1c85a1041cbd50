from fastapi import APIRouter
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from recipebox.errors import AuthenticationError
from recipebox.web.deps import AppDep, AuthTokenDep
from recipebox.web.openapi import ErrorResponse

router = APIRouter(tags=["auth"])


class LoginRequest(BaseModel):
    """Authentication request. Missing fields are reported as 400 by the login operation."""

    username: str | None = Field(None, description="Admin username (case-insensitive)")
    password: str | None = Field(None, description="Admin password")


class LoginResponse(BaseModel):
    """Authentication response."""

    token: str = Field(..., description="Bearer token for subsequent admin requests, valid for 24 hours")
    username: str = Field(..., description="Authenticated username")
    message: str = Field("Login successful", description="Human readable status")


class VerifyResponse(BaseModel):
    """Token verification result."""

    valid: bool = Field(..., description="Whether the presented token is valid")
    username: str | None = Field(None, description="Username carried by a valid token")


@router.post(
    "/auth/login",
    summary="Admin login",
    description="Authenticate with username and password to receive a bearer token.",
    operation_id="login",
    responses={
        200: {"description": "Successfully authenticated"},
        400: {"model": ErrorResponse, "description": "Username or password missing"},
        401: {"model": ErrorResponse, "description": "Invalid credentials"},
    },
)
async def login(login_data: LoginRequest, app: AppDep) -> LoginResponse:
    result = await app.login(login_data.username, login_data.password)
    return LoginResponse(token=result.token, username=result.username)


@router.get(
    "/auth/verify",
    summary="Verify token",
    description="Check whether the bearer token in the Authorization header is still valid.",
    operation_id="verifyToken",
    response_model=VerifyResponse,
    response_model_exclude_none=True,
    responses={
        200: {"description": "Token is valid"},
        401: {"model": VerifyResponse, "description": "Token missing, invalid or expired"},
    },
)
async def verify(app: AppDep, auth_token: AuthTokenDep) -> VerifyResponse | JSONResponse:
    try:
        claims = app.verify_token(auth_token)
    except AuthenticationError:
        return JSONResponse(status_code=401, content={"valid": False})
    return VerifyResponse(valid=True, username=claims.username)
