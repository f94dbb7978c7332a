from datetime import datetime, timedelta, timezone

import jwt

from auth.domain.entities import Subject
from shared.config import settings
from shared.exceptions import AuthenticationError


def resolve_subject(token: str) -> Subject:
    """Decode a bearer token into the caller's Subject claim."""
    try:
        payload = jwt.decode(
            token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM]
        )
    except jwt.PyJWTError:
        raise AuthenticationError("Invalid or expired token")

    user_id = payload.get("sub")
    if not user_id:
        raise AuthenticationError("Token has no subject")

    return Subject.build(
        id=user_id,
        roles=payload.get("roles") or (),
        permission_codes=payload.get("permissions") or (),
        unit_ids=_unit_ids(payload.get("units") or ()),
    )


def issue_token(subject: Subject, expires_minutes: int | None = None) -> str:
    """Mint a token carrying the subject's claims (development and tests)."""
    now = datetime.now(timezone.utc)
    minutes = expires_minutes if expires_minutes is not None else settings.JWT_EXPIRATION_MINUTES
    payload = {
        "sub": subject.id,
        "roles": sorted(subject.roles),
        "permissions": sorted(subject.permission_codes),
        "units": sorted(subject.unit_ids),
        "iat": now,
        "exp": now + timedelta(minutes=minutes),
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def _unit_ids(units) -> list[str]:
    # Session tokens may carry unit objects ({"id": ..., "code": ...}) or bare ids.
    return [str(u["id"]) if isinstance(u, dict) else str(u) for u in units]
