from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jwt import PyJWTError
from pydantic import BaseModel

from booking_backend.auth import jwt_handler
from booking_backend.core.errors import AuthenticationError

ADMIN_ROLE = "admin"

security = HTTPBearer(auto_error=False)


class RequestContext(BaseModel):
    """Identity of the caller, passed explicitly to every handler that needs it."""
    user_id: str
    role: str = "customer"
    franchise_id: str | None = None

    @property
    def is_admin(self) -> bool:
        return self.role == ADMIN_ROLE


def context_from_token(token: str) -> RequestContext:
    try:
        payload = jwt_handler.decode_access_token(token)
    except PyJWTError as exc:
        raise AuthenticationError("Invalid token") from exc

    user_id = payload.get("sub")
    if not user_id:
        raise AuthenticationError("Invalid token subject")

    return RequestContext(
        user_id=user_id,
        role=payload.get("role") or "customer",
        franchise_id=payload.get("franchise_id"),
    )


def get_request_context(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> RequestContext:
    if credentials is None or not credentials.credentials:
        raise AuthenticationError()
    return context_from_token(credentials.credentials)
