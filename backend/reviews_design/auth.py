import re
from datetime import datetime, timedelta, timezone
from typing import Annotated
from uuid import UUID

from fastapi import Depends, HTTPException, Request, status
from jose import JWTError, jwt
from pydantic import BaseModel, Field
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import JSONResponse, Response

from reviews_design.config import settings

MODERATE_COMMENTS = "moderate_comments"
MANAGE_STORE = "manage_store"

# Audience of form nonces; tokens carrying it are never accepted as credentials
NONCE_AUDIENCE = "reviews-design:nonce"


class TokenPayload(BaseModel):
    sub: str
    exp: datetime
    capabilities: list[str] = Field(default_factory=list)


class CurrentUser(BaseModel):
    id: UUID
    token_payload: TokenPayload

    def can(self, capability: str) -> bool:
        return capability in self.token_payload.capabilities


PUBLIC_ROUTES = [
    r"^/$",
    r"^/health$",
    r"^/docs$",
    r"^/redoc$",
    r"^/openapi\.json$",
    r"^/api/v1/products/[^/]+/reviews$",
    r"^/api/v1/products/[^/]+/review-form$",
    r"^/api/v1/reviews/theme\.css$",
    r"^/api/v1/media/.*$",
]

_PUBLIC_ROUTE_PATTERNS = [re.compile(pattern) for pattern in PUBLIC_ROUTES]


def _is_public_route(path: str) -> bool:
    return any(pattern.match(path) for pattern in _PUBLIC_ROUTE_PATTERNS)


def _raise_unauthorized(detail: str) -> None:
    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def decode_jwt_token(token: str) -> TokenPayload:
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
        )

        sub = payload.get("sub")
        exp = payload.get("exp")

        if not all([sub, exp]):
            _raise_unauthorized("Invalid token: missing required claims")

        if "act" in payload:
            _raise_unauthorized("Invalid token: form nonces are not credentials")

        exp_datetime = datetime.fromtimestamp(exp, tz=timezone.utc)
        if exp_datetime < datetime.now(timezone.utc):
            _raise_unauthorized("Token has expired")

        capabilities = payload.get("capabilities") or []
        if not isinstance(capabilities, list):
            capabilities = []

        return TokenPayload(sub=sub, exp=exp_datetime, capabilities=[str(c) for c in capabilities])

    except JWTError as e:
        _raise_unauthorized(f"Invalid token: {e}")


def _extract_bearer_token(authorization: str | None) -> str | None:
    if not authorization:
        return None
    parts = authorization.split()
    if len(parts) == 2 and parts[0].lower() == "bearer":
        return parts[1]
    return None


class AuthMiddleware(BaseHTTPMiddleware):
    """Authenticates bearer tokens. Public routes also accept anonymous callers."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        is_public = _is_public_route(request.url.path)
        request.state.user = None

        token = _extract_bearer_token(request.headers.get("Authorization"))
        if not token:
            if is_public:
                return await call_next(request)
            return JSONResponse(
                status_code=status.HTTP_401_UNAUTHORIZED,
                content={"detail": "Missing authentication credentials"},
                headers={"WWW-Authenticate": "Bearer"},
            )

        try:
            token_payload = decode_jwt_token(token)
            user_id = UUID(token_payload.sub)
            request.state.user = CurrentUser(id=user_id, token_payload=token_payload)
        except HTTPException as e:
            return JSONResponse(
                status_code=e.status_code,
                content={"detail": e.detail},
                headers=e.headers or {},
            )
        except ValueError:
            return JSONResponse(
                status_code=status.HTTP_401_UNAUTHORIZED,
                content={"detail": "Invalid token: subject must be a valid UUID"},
                headers={"WWW-Authenticate": "Bearer"},
            )

        return await call_next(request)


def get_current_user(request: Request) -> CurrentUser:
    user = getattr(request.state, "user", None)
    if user is None:
        _raise_unauthorized("Not authenticated")
    return user


def get_optional_user(request: Request) -> CurrentUser | None:
    return getattr(request.state, "user", None)


def require_capability(capability: str):
    """Dependency factory rejecting callers whose token lacks ``capability``."""

    def dependency(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        if not user.can(capability):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Missing capability: {capability}",
            )
        return user

    return dependency


# =============================================================================
# Form nonces
# =============================================================================


def create_nonce(action: str, user_id: UUID, object_id: UUID) -> str:
    """Issue a short-lived token binding a form submission to one user, action and object."""
    expires = datetime.now(timezone.utc) + timedelta(minutes=settings.nonce_expire_minutes)
    payload = {
        "sub": str(user_id),
        "act": action,
        "oid": str(object_id),
        "aud": NONCE_AUDIENCE,
        "exp": expires.timestamp(),
    }
    return jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def verify_nonce(nonce: str, action: str, user_id: UUID, object_id: UUID) -> bool:
    try:
        payload = jwt.decode(
            nonce,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
            audience=NONCE_AUDIENCE,
        )
    except JWTError:
        return False
    return (
        payload.get("act") == action
        and payload.get("sub") == str(user_id)
        and payload.get("oid") == str(object_id)
    )


OptionalUser = Annotated[CurrentUser | None, Depends(get_optional_user)]
RequireModerator = Annotated[CurrentUser, Depends(require_capability(MODERATE_COMMENTS))]
RequireStoreManager = Annotated[CurrentUser, Depends(require_capability(MANAGE_STORE))]
