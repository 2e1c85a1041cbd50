from typing import Annotated, cast

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from recipebox.app import App
from recipebox.core.modules.token.models import AuthToken, TokenClaims

# Security schemes
bearer_scheme = HTTPBearer(scheme_name="BearerAuth", bearerFormat="JWT", auto_error=False)


async def get_app(request: Request) -> App:
    return cast(App, request.app.state.app)


async def get_auth_token(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)] = None,
) -> AuthToken | None:
    """Extract the token from an `Authorization: Bearer` header, None if absent or malformed."""
    if credentials and credentials.scheme.lower() == "bearer" and credentials.credentials:
        return AuthToken(credentials.credentials)
    return None


async def require_admin(
    request: Request,
    app: Annotated[App, Depends(get_app)],
    auth_token: Annotated[AuthToken | None, Depends(get_auth_token)],
) -> TokenClaims:
    """Reject the request with 401 unless it carries a valid token.

    Runs before the route handler, so a rejected request never reaches the mutating operation.
    The verified identity is kept on `request.state.identity`.
    """
    identity = app.authorize_admin(auth_token)
    request.state.identity = identity
    return identity


# Type aliases for dependencies
AppDep = Annotated[App, Depends(get_app)]
AuthTokenDep = Annotated[AuthToken | None, Depends(get_auth_token)]
AdminIdentityDep = Annotated[TokenClaims, Depends(require_admin)]
