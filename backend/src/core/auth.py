"""Authentication module for Keycloak JWT validation."""
import logging
from dataclasses import dataclass, field

import httpx
import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jwt import PyJWKClient

from core.config import Settings, get_settings
from services.exceptions import UserIdMismatchError

logger = logging.getLogger(__name__)


# HTTP Bearer token scheme
security = HTTPBearer(auto_error=False)

# Cache for JWKS clients (reuse across requests)
_jwks_clients: dict[str, PyJWKClient] = {}


@dataclass(frozen=True)
class CurrentUser:
    """The authenticated caller, as described by the access token."""

    user_id: str
    roles: frozenset[str] = field(default_factory=frozenset)
    admin_role: str = "ROLE_ADMIN"

    @property
    def is_admin(self) -> bool:
        """True when the token carries the configured admin realm role."""
        return self.admin_role in self.roles


def get_jwks_client(settings: Settings) -> PyJWKClient:
    """Get or create a cached JWKS client for the configured realm."""
    if settings.keycloak_jwks_url not in _jwks_clients:
        _jwks_clients[settings.keycloak_jwks_url] = PyJWKClient(
            settings.keycloak_jwks_url,
            cache_jwk_set=True,
            lifespan=3600,  # Cache keys for 1 hour
        )
    return _jwks_clients[settings.keycloak_jwks_url]


def decode_jwt(token: str, settings: Settings) -> dict:
    """
    Decode and validate an access token issued by the Keycloak realm.

    The audience is only verified when `keycloak_audience` is configured; Keycloak
    public clients issue tokens whose `aud` is `account` by default.

    Raises:
        HTTPException: If token is invalid, expired, or has wrong audience/issuer.
    """
    options = {"verify_aud": bool(settings.keycloak_audience)}
    try:
        jwks_client = get_jwks_client(settings)
        signing_key = jwks_client.get_signing_key_from_jwt(token)

        return jwt.decode(
            token,
            signing_key.key,
            algorithms=["RS256"],
            audience=settings.keycloak_audience or None,
            issuer=settings.keycloak_issuer,
            options=options,
        )

    except jwt.ExpiredSignatureError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token has expired",
            headers={"WWW-Authenticate": "Bearer"},
        )
    except jwt.InvalidAudienceError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid audience",
            headers={"WWW-Authenticate": "Bearer"},
        )
    except jwt.InvalidIssuerError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid issuer",
            headers={"WWW-Authenticate": "Bearer"},
        )
    except jwt.PyJWTError as e:
        # Full details stay server-side
        logger.warning("JWT validation failed: %s", e, exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    except httpx.HTTPError as e:
        logger.error("Failed to fetch JWKS from Keycloak: %s", e, exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Could not validate credentials",
        )


def user_from_claims(payload: dict, settings: Settings) -> CurrentUser:
    """
    Build the current user from decoded token claims.

    Roles come from the Keycloak `realm_access.roles` claim.

    Raises:
        HTTPException: If the token has no subject.
    """
    subject = payload.get("sub")
    if not subject:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token: missing sub claim",
            headers={"WWW-Authenticate": "Bearer"},
        )
    realm_access = payload.get("realm_access") or {}
    roles = frozenset(realm_access.get("roles") or [])
    return CurrentUser(user_id=subject, roles=roles, admin_role=settings.admin_role)


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    settings: Settings = Depends(get_settings),
) -> CurrentUser:
    """
    Dependency that validates the bearer token and returns the current user.

    In DEV_MODE, bypasses token validation and returns the configured dev user.
    """
    if settings.dev_mode:
        return CurrentUser(user_id=settings.dev_user_id, admin_role=settings.admin_role)

    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    payload = decode_jwt(credentials.credentials, settings)
    return user_from_claims(payload, settings)


async def require_admin(
    current_user: CurrentUser = Depends(get_current_user),
) -> CurrentUser:
    """Dependency for admin-only routes (403 without the admin role)."""
    if not current_user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin role required",
        )
    return current_user


def ensure_user_matches(user_id: str, current_user: CurrentUser) -> None:
    """
    Verify that the user id in the path belongs to the caller.

    Raises:
        UserIdMismatchError: If the path user id differs from the token subject.
    """
    if user_id != current_user.user_id:
        raise UserIdMismatchError()


def ensure_user_matches_or_admin(user_id: str, current_user: CurrentUser) -> None:
    """Same as ensure_user_matches, but admins may act on behalf of any user."""
    if current_user.is_admin:
        return
    ensure_user_matches(user_id, current_user)
