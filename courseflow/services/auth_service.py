from __future__ import annotations

import logging
import re

import jwt
from argon2 import PasswordHasher
from argon2.exceptions import InvalidHash, VerificationError, VerifyMismatchError

from courseflow.core.clock import Clock
from courseflow.core.errors import Conflict, Unauthenticated, ValidationError
from courseflow.core.metrics import LOGIN_ATTEMPTS
from courseflow.models.actor import Actor
from courseflow.models.user import ROLES, Role, User, normalize_email
from courseflow.repos.user_repo import UserRepo
from courseflow.services.token_service import ACCESS_TOKEN_TTL_MIN, TokenSigner
from courseflow.services.token_blacklist import TokenBlacklist

logger = logging.getLogger(__name__)

# Argon2 hash strings encode parameters + salt.
_ph = PasswordHasher()

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
PASSWORD_MIN = 8


def hash_password(plain_password: str) -> str:
    if not plain_password:
        raise ValueError("password must be non-empty")
    return _ph.hash(plain_password)


# verify_password() must catch Argon2 exceptions and return False
def verify_password(plain_password: str, password_hash: str) -> bool:
    if not plain_password or not password_hash:
        return False
    try:
        return _ph.verify(password_hash, plain_password)
    except (VerifyMismatchError, VerificationError, InvalidHash):
        return False


class AuthN:
    """Registration, credential checks and bearer-token lifecycle."""

    def __init__(
        self,
        *,
        users: UserRepo,
        blacklist: TokenBlacklist,
        clock: Clock,
        token_ttl_min: int = ACCESS_TOKEN_TTL_MIN,
        signer: TokenSigner | None = None,
    ) -> None:
        self._users = users
        self._blacklist = blacklist
        self._clock = clock
        self._signer = signer or TokenSigner(ttl_min=token_ttl_min)

    def register(
        self, email: str, password: str, name: str, role: Role = "student"
    ) -> User:
        email = normalize_email(email)
        name = name.strip()

        errors: dict[str, str] = {}
        if not _EMAIL_RE.match(email):
            errors["email"] = "invalid email address"
        if not name:
            errors["name"] = "is required"
        if len(password) < PASSWORD_MIN:
            errors["password"] = f"must be at least {PASSWORD_MIN} characters"
        if role not in ROLES:
            errors["role"] = "unknown role"
        if errors:
            raise ValidationError(errors)

        if self._users.get_by_email(email) is not None:
            raise Conflict("email already registered")

        user = self._users.add(
            User.new(
                email=email,
                password_hash=hash_password(password),
                name=name,
                role=role,
                created_at=self._clock.now(),
            )
        )
        logger.info("User registered  user_id=%s role=%s", user.id, user.role)
        return user

    def authenticate(self, email: str, password: str) -> User | None:
        user = self._users.get_by_email(normalize_email(email))
        if user is None or not verify_password(password, user.password_hash):
            LOGIN_ATTEMPTS.labels(result="failure").inc()
            logger.warning("Login failed")
            return None
        LOGIN_ATTEMPTS.labels(result="success").inc()
        logger.info("Login succeeded  user_id=%s", user.id)
        return user

    def issue(self, user: User) -> str:
        return self._signer.sign(sub=str(user.id), role=user.role)

    def resolve(self, token: str | None) -> Actor:
        """Map a bearer token to the acting user, or raise Unauthenticated."""
        if not token:
            raise Unauthenticated()
        try:
            claims = self._signer.verify(token)
        except jwt.ExpiredSignatureError:
            logger.warning("Expired token rejected")
            raise Unauthenticated("token expired") from None
        except jwt.InvalidTokenError as e:
            logger.warning("Invalid token rejected: %s", e)
            raise Unauthenticated("invalid token") from None

        if self._blacklist.is_revoked(claims.jti):
            logger.warning("Revoked token rejected jti=%s", claims.jti)
            raise Unauthenticated("token revoked")

        try:
            user_id = int(claims.sub)
        except ValueError:
            raise Unauthenticated("invalid token") from None
        user = self._users.get_by_id(user_id)
        if user is None:
            raise Unauthenticated("unknown user")
        # Role comes from the stored user, not the claim.
        return Actor.of(user)

    def invalidate(self, token: str | None) -> None:
        """Revoke a token.  Invalid or expired tokens are already unusable."""
        if not token:
            return
        try:
            claims = self._signer.verify(token)
        except jwt.InvalidTokenError:
            return
        self._blacklist.revoke(claims.jti, claims.expires_at.timestamp())
        logger.info("Token revoked jti=%s", claims.jti)

    def seed_admin(self, email: str, password: str, name: str = "Administrator") -> User:
        """Create the bootstrap admin unless a user with that email exists."""
        existing = self._users.get_by_email(normalize_email(email))
        if existing is not None:
            return existing
        return self.register(email, password, name, role="admin")
