from datetime import UTC, datetime
from uuid import UUID

import structlog
from jose import JWTError, jwt

from recipebox.config import TOKEN_LIFETIME
from recipebox.core.core import Service
from recipebox.core.modules.admin.models import AdminIdentity
from recipebox.core.modules.token.models import AuthToken, LoginResult, TokenClaims
from recipebox.errors import AuthenticationError
from recipebox.utils import now as utc_now

logger = structlog.get_logger(__name__)

ALGORITHM = "HS256"


class TokenService(Service):
    """Mints and verifies stateless signed login tokens."""

    @property
    def _secret(self) -> str:
        return self.core.config.jwt_secret

    def issue_token(self, admin: AdminIdentity, now: datetime | None = None) -> LoginResult:
        """Sign a token for admin, valid for TOKEN_LIFETIME from now."""
        issued_at = (now or utc_now()).replace(microsecond=0)
        expires_at = issued_at + TOKEN_LIFETIME
        payload = {
            "sub": str(admin.id),
            "username": admin.username,
            "iat": int(issued_at.timestamp()),
            "exp": int(expires_at.timestamp()),
        }
        token = AuthToken(jwt.encode(payload, self._secret, algorithm=ALGORITHM))
        return LoginResult(token=token, username=admin.username, expires_at=expires_at)

    def verify_token(self, token: str, now: datetime | None = None) -> TokenClaims:
        """Check signature and expiry, return the token's claims.

        Raises:
            AuthenticationError: for any bad token, with the same message whatever the cause.
        """
        try:
            # Expiry is checked below against the given clock, not jose's own
            payload = jwt.decode(token, self._secret, algorithms=[ALGORITHM], options={"verify_exp": False})
        except JWTError as e:
            logger.debug("token_rejected", reason="signature", error=str(e))
            raise AuthenticationError from None

        try:
            claims = TokenClaims(
                subject_id=UUID(payload["sub"]),
                username=payload["username"],
                issued_at=datetime.fromtimestamp(payload["iat"], UTC),
                expires_at=datetime.fromtimestamp(payload["exp"], UTC),
            )
        except (KeyError, TypeError, ValueError):
            logger.debug("token_rejected", reason="claims")
            raise AuthenticationError from None

        if (now or utc_now()) >= claims.expires_at:
            logger.debug("token_rejected", reason="expired", username=claims.username)
            raise AuthenticationError

        return claims
