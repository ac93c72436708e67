"""Signed bearer tokens (JWT, ES256).

Each ``TokenSigner`` owns its own EC key pair, generated at construction,
so tokens die with the process and two platforms built side by side never
accept each other's tokens.  AuthN is the only caller.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

import jwt
from cryptography.hazmat.primitives.asymmetric import ec

ALGORITHM = "ES256"
ISSUER = "courseflow"
AUDIENCE = "courseflow-api"
ACCESS_TOKEN_TTL_MIN = 15
REQUIRED_CLAIMS = ["sub", "role", "exp", "iat", "jti"]


@dataclass(frozen=True, slots=True)
class AccessClaims:
    sub: str
    role: str
    jti: str
    issued_at: datetime
    expires_at: datetime

    @staticmethod
    def from_payload(payload: dict) -> AccessClaims:
        return AccessClaims(
            sub=str(payload["sub"]),
            role=str(payload["role"]),
            jti=str(payload["jti"]),
            issued_at=datetime.fromtimestamp(payload["iat"], tz=UTC),
            expires_at=datetime.fromtimestamp(payload["exp"], tz=UTC),
        )


class TokenSigner:
    def __init__(self, *, ttl_min: int = ACCESS_TOKEN_TTL_MIN) -> None:
        if ttl_min <= 0:
            raise ValueError("ttl_min must be positive")
        self._private_key = ec.generate_private_key(ec.SECP256R1())
        self._public_key = self._private_key.public_key()
        self.ttl_min = ttl_min

    def sign(self, *, sub: str, role: str, now: datetime | None = None) -> str:
        """Issue a token for ``sub``.  ``role`` is informational only."""
        issued = now or datetime.now(UTC)
        payload = {
            "sub": sub,
            "role": role,
            "iss": ISSUER,
            "aud": AUDIENCE,
            "exp": issued + timedelta(minutes=self.ttl_min),
            "iat": issued,
            "jti": str(uuid.uuid4()),
        }
        return jwt.encode(payload, self._private_key, algorithm=ALGORITHM)

    def verify(self, token: str) -> AccessClaims:
        """Check signature, issuer, audience and expiry.

        The algorithm is pinned, so alg:none and alg-switching tokens fail.
        Raises jwt.ExpiredSignatureError or jwt.InvalidTokenError.
        """
        payload = jwt.decode(
            token,
            self._public_key,
            algorithms=[ALGORITHM],
            issuer=ISSUER,
            audience=AUDIENCE,
            options={"require": REQUIRED_CLAIMS},
        )
        return AccessClaims.from_payload(payload)
