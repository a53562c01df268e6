"""
FastAPI dependencies for the session context and database.
"""
import uuid
from typing import Annotated

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from sitebuilder.core.security import decode_token
from sitebuilder.database import get_db
from sitebuilder.integrations.llm import TextGenerator, get_text_generator
from sitebuilder.models.user import User

# The pipeline reports a missing actor itself, so a missing header is not a 403 here
security = HTTPBearer(auto_error=False)


async def get_optional_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> User | None:
    """Resolve the requesting actor from the bearer token, or None."""
    if credentials is None:
        return None

    payload = decode_token(credentials.credentials)
    if payload is None:
        return None

    subject = payload.get("sub")
    if subject is None:
        return None

    try:
        user_id = uuid.UUID(str(subject))
    except ValueError:
        return None

    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()

    if user is None or not user.is_active:
        return None

    return user


# Common dependencies
OptionalUser = Annotated[User | None, Depends(get_optional_user)]
DbSession = Annotated[AsyncSession, Depends(get_db)]
TextGeneratorDep = Annotated[TextGenerator, Depends(get_text_generator)]
