"""Password hashing and session-backed JWT access tokens.

Every issued token has a row in the ``sessions`` table keyed by its
``jti`` claim. A token is valid only while its row exists and is not
revoked, so logging out or changing a password takes effect immediately.
Tokens carry no roles or permissions.
"""

import logging
import uuid
from datetime import datetime, timedelta
from functools import lru_cache
from typing import List, Optional
from uuid import UUID

from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy.orm import Query, Session

from rbac_admin.core.config import get_settings
from rbac_admin.db.models import Session as SessionModel

logger = logging.getLogger(__name__)

TOKEN_TYPE = "access"


@lru_cache
def password_context() -> CryptContext:
    """bcrypt context using the configured cost factor."""
    return CryptContext(
        schemes=["bcrypt"],
        deprecated="auto",
        bcrypt__rounds=get_settings().password_hash_rounds,
    )


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return password_context().verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    return password_context().hash(password)


def create_access_token(
    user_id: UUID,
    db: Session,
    ip_address: Optional[str] = None,
    user_agent: Optional[str] = None,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """Sign a token for ``user_id`` and record its session. Commits."""
    settings = get_settings()
    lifetime = expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    expires_at = datetime.utcnow() + lifetime
    jti = uuid.uuid4().hex

    claims = {"sub": str(user_id), "exp": expires_at, "jti": jti, "type": TOKEN_TYPE}
    token = jwt.encode(claims, settings.secret_key, algorithm=settings.algorithm)

    db.add(SessionModel(
        user_id=user_id,
        token_jti=jti,
        ip_address=ip_address,
        user_agent=user_agent,
        expires_at=expires_at,
    ))
    db.commit()
    return token


def decode_token_claims(token: str) -> Optional[dict]:
    """Verified claims of ``token``, or None when the signature or expiry is bad."""
    settings = get_settings()
    try:
        return jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except JWTError:
        return None


def _live_sessions(db: Session) -> Query:
    return db.query(SessionModel).filter(SessionModel.revoked_at.is_(None))


def decode_token(token: str, db: Session) -> Optional[UUID]:
    """User id of a valid access token whose session is still live."""
    claims = decode_token_claims(token)
    if not claims or claims.get("type") != TOKEN_TYPE:
        return None

    subject, jti = claims.get("sub"), claims.get("jti")
    if not subject or not jti:
        return None

    try:
        user_id = UUID(subject)
    except ValueError:
        return None

    session = _live_sessions(db).filter(SessionModel.token_jti == jti).first()
    if session is None or session.user_id != user_id:
        logger.debug("Rejected token with unknown or revoked session %s", jti)
        return None
    return user_id


def active_sessions(user_id: UUID, db: Session) -> List[SessionModel]:
    """Unrevoked, unexpired sessions of a user, newest first."""
    return (
        _live_sessions(db)
        .filter(SessionModel.user_id == user_id, SessionModel.expires_at > datetime.utcnow())
        .order_by(SessionModel.created_at.desc())
        .all()
    )


def revoke_session(jti: str, db: Session) -> bool:
    """Revoke one session. False when it is unknown or already revoked."""
    session = _live_sessions(db).filter(SessionModel.token_jti == jti).first()
    if session is None:
        return False
    session.revoked_at = datetime.utcnow()
    db.commit()
    return True


def revoke_user_sessions(user_id: UUID, db: Session, except_jti: Optional[str] = None) -> int:
    """Revoke every live session of a user, optionally sparing one. Returns the count."""
    query = _live_sessions(db).filter(SessionModel.user_id == user_id)
    if except_jti:
        query = query.filter(SessionModel.token_jti != except_jti)

    count = query.update({SessionModel.revoked_at: datetime.utcnow()}, synchronize_session=False)
    if count:
        db.commit()
        logger.info("Revoked %d session(s) of user %s", count, user_id)
    return count
