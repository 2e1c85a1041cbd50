from recipebox.core.core import Service
from recipebox.core.modules.token.models import AuthToken, TokenClaims
from recipebox.errors import AuthenticationError


class AccessService(Service):
    def ensure_authenticated(self, auth_token: AuthToken | None) -> TokenClaims:
        """Verify the bearer token, raise AuthenticationError if missing or invalid."""
        if not auth_token:
            raise AuthenticationError
        return self.core.services.token.verify_token(auth_token)

    def ensure_admin(self, auth_token: AuthToken | None) -> TokenClaims:
        """Ensure the caller is the admin.

        There is a single privilege tier, so any valid token is an admin token.
        """
        return self.ensure_authenticated(auth_token)
