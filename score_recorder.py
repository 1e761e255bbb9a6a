"""
Score persistence.
Resolves (or lazily creates) the user behind a score submission and appends
the score row.
"""
import logging
from typing import Optional, Union

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from database import Score, User

logger = logging.getLogger(__name__)

PLACEHOLDER_PASSWORD = "123"
PLACEHOLDER_PHONE = "00000000000"


def find_user(db: Session, name: str) -> Optional[User]:
    return db.query(User).filter(User.name == name).first()


def resolve_user(db: Session, name: str) -> User:
    """
    Return the user with exactly this name, creating it if needed.

    The insert runs in a savepoint so that a concurrent request creating the
    same name (unique index on users.name) makes us re-read in a fresh
    transaction instead of failing.
    """
    user = find_user(db, name)
    if user:
        return user

    candidate = User(
        name=name,
        email=f"{name}@exemplo.com",
        password=PLACEHOLDER_PASSWORD,
        phone=PLACEHOLDER_PHONE,
    )
    try:
        with db.begin_nested():
            db.add(candidate)
        logger.info("Created user %r", name)
        return candidate
    except IntegrityError:
        # Under REPEATABLE READ the re-read needs a new transaction to see the other insert
        db.rollback()
        user = find_user(db, name)
        if user is None:
            raise
        return user


def record_score(db: Session, name: str, score: Union[int, float]) -> Score:
    """
    Append a score for `name`.

    Args:
        db: Database session
        name: User name (case-sensitive)
        score: Score value

    Returns:
        The persisted Score row
    """
    user = resolve_user(db, name)
    row = Score(score=score, user_id=user.id)
    db.add(row)
    db.commit()
    db.refresh(row)
    return row
