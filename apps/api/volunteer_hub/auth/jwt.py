from __future__ import annotations

import uuid
from dataclasses import dataclass
from enum import Enum

import jwt
from jwt import PyJWTError

from volunteer_hub.core.config import settings


class Role(str, Enum):
    VOLUNTEER = "volunteer"
    ORGANIZER = "organizer"


@dataclass(frozen=True)
class Principal:
    user_id: uuid.UUID
    role: Role
    email: str | None = None
    name: str | None = None
    organization: str | None = None


def verify_access_token(token: str) -> dict:
    options = {"require": ["sub", "exp"], "verify_aud": settings.jwt_audience is not None}
    try:
        return jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            audience=settings.jwt_audience,
            issuer=settings.jwt_issuer,
            options=options,
        )
    except PyJWTError as exc:
        raise ValueError("invalid access token") from exc


def principal_from_claims(claims: dict) -> Principal:
    try:
        user_id = uuid.UUID(str(claims["sub"]))
    except (KeyError, ValueError) as exc:
        raise ValueError("token subject is not a user id") from exc

    metadata = claims.get("user_metadata") or {}
    role = Role.VOLUNTEER
    # Identity-provider roles such as "authenticated" map to volunteers.
    for raw_role in (metadata.get("role"), claims.get("role")):
        if raw_role and str(raw_role).lower() in {r.value for r in Role}:
            role = Role(str(raw_role).lower())
            break

    return Principal(
        user_id=user_id,
        role=role,
        email=claims.get("email"),
        name=claims.get("name") or metadata.get("name"),
        organization=claims.get("organization") or metadata.get("organization"),
    )
