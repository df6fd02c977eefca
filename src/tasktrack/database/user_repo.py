"""Repository for users table operations."""

from typing import Optional

from sqlalchemy.orm import Session

from ..errors import NotFoundError
from ..utils.logging import get_logger
from .schema import User, UserRole, UserTeam, UserType

logger = get_logger(__name__)


def create_user(
    session: Session,
    *,
    name: str,
    email: str,
    code: str,
    role: UserRole = UserRole.MEMBER,
    team: UserTeam = UserTeam.EXTERNAL,
    type: UserType = UserType.ACTIVE,
    password_hash: Optional[str] = None,
) -> User:
    """
    Create a user row.

    Returns:
        The new User (flushed, so ``id`` is populated)
    """
    if not email:
        raise ValueError("User must have email")

    user = User(
        name=name,
        email=email,
        code=code,
        role=role,
        team=team,
        type=type,
        password_hash=password_hash,
    )
    session.add(user)
    session.flush()
    logger.debug(f"Created user: {user.id} <{email}>")
    return user


def get_user(session: Session, user_id: int) -> User:
    """
    Get user by ID.

    Raises:
        NotFoundError: If the user does not exist
    """
    user = session.get(User, user_id)
    if user is None:
        raise NotFoundError("User", user_id)
    return user


def get_user_by_email(session: Session, email: str) -> Optional[User]:
    return session.query(User).filter(User.email == email).first()
