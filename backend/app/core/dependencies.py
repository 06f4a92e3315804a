"""
Authentication dependencies for FastAPI.

Resolves the bearer token to the acting staff user. Ledger services receive
the result as `actor` and stamp `actor["sub"]` (username) and
`actor["user_id"]` on every row and transaction log they write.
"""

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
from backend.app.core.exceptions import AuthenticationError, InsufficientPermissionsError
from backend.app.core.jwt import decode_access_token
from backend.app.db.session import get_db
from backend.app.models.user import User

security = HTTPBearer()


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: AsyncSession = Depends(get_db)
) -> dict:
    """
    FastAPI dependency for JWT authentication.

    The token only identifies the user. Username and role are read from the
    users table, so a role change or deactivation applies to tokens already
    issued.

    Returns:
        Actor dict: {"sub": username, "user_id": id, "role": role value}

    Raises:
        AuthenticationError: bad signature, expired token, unknown user
        InsufficientPermissionsError: user is deactivated
    """
    payload = decode_access_token(credentials.credentials)
    if payload is None:
        raise AuthenticationError("Could not validate credentials")

    user_id = payload.get("user_id")
    if not user_id:
        raise AuthenticationError("Invalid token payload")

    user = await db.get(User, user_id)
    if user is None:
        raise AuthenticationError("User not found")
    if not user.is_active:
        raise InsufficientPermissionsError("User account is inactive")

    return {"sub": user.username, "user_id": user.id, "role": user.role.value}
