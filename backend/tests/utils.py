"""
Shared test helpers.
"""

from sqlalchemy import select

from backend.app.core.jwt import create_access_token
from backend.app.models.enums import UserRole
from backend.app.models.user import User


async def make_user(session, username: str, role: UserRole, name: str = None) -> User:
    user = User(username=username, name=name or username.title(), role=role, is_active=True)
    session.add(user)
    await session.commit()
    return user


def actor_for(user: User) -> dict:
    """Token payload shape produced by get_current_user."""
    return {"sub": user.username, "user_id": user.id, "role": user.role.value}


def auth_headers(user: User) -> dict:
    token = create_access_token(data=actor_for(user))
    return {"Authorization": f"Bearer {token}"}


async def reload(session, model, pk):
    """Fresh copy of a row, bypassing the session's (possibly expired) identity map."""
    result = await session.execute(
        select(model).where(model.id == pk).execution_options(populate_existing=True)
    )
    return result.scalar_one()
