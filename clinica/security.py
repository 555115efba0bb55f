from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import List, Callable

from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from jose import jwt, JWTError
from jose.exceptions import ExpiredSignatureError
from passlib.context import CryptContext
from pydantic import BaseModel, ValidationError

from clinica.config import Settings, get_settings
from clinica.constants import Role
from clinica.errors import ForbiddenError, InvalidTokenError

settings = get_settings()

# Only used by the docs UI; clients send the access token as a Bearer header.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/sign-in", auto_error=False)

# ------------------------ Password hashing helpers ------------------------

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.BCRYPT_SALT_ROUNDS,
)


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str | None) -> bool:
    """Returns False when there is no stored hash."""
    if not hashed_password:
        return False
    return pwd_context.verify(plain_password, hashed_password)


# ------------------------ JWT helpers ------------------------


class TokenClaims(BaseModel):
    email: str
    role: Role
    id: str | None = None


class TokenScope(str, Enum):
    ACCESS = "access"
    REFRESH = "refresh"
    # Verify-account and reset-password share this scope
    ACTION = "action"


@dataclass(frozen=True)
class ScopeKey:
    secret: str
    ttl: timedelta


class TokenService:
    """Issues and verifies signed, time-limited tokens.

    Each scope has its own secret and lifetime, so a token only verifies in
    the scope it was minted for.
    """

    def __init__(self, keys: dict[TokenScope, ScopeKey], algorithm: str = "HS256"):
        self._keys = keys
        self._algorithm = algorithm

    @classmethod
    def from_settings(cls, s: Settings) -> "TokenService":
        return cls(
            {
                TokenScope.ACCESS: ScopeKey(
                    s.JWT_ACCESS_SECRET, timedelta(minutes=s.ACCESS_TOKEN_EXPIRE_MINUTES)
                ),
                TokenScope.REFRESH: ScopeKey(
                    s.JWT_REFRESH_SECRET, timedelta(days=s.REFRESH_TOKEN_EXPIRE_DAYS)
                ),
                TokenScope.ACTION: ScopeKey(
                    s.JWT_RESET_SECRET, timedelta(minutes=s.RESET_TOKEN_EXPIRE_MINUTES)
                ),
            },
            algorithm=s.JWT_ALGORITHM,
        )

    def issue(self, claims: TokenClaims, secret: str, ttl: timedelta) -> str:
        to_encode = claims.model_dump(mode="json", exclude_none=True)
        to_encode["exp"] = datetime.now(timezone.utc) + ttl
        return jwt.encode(to_encode, secret, algorithm=self._algorithm)

    def verify(self, token: str, secret: str) -> TokenClaims:
        """Decode and check signature and expiry; raises InvalidTokenError."""
        if not token:
            raise InvalidTokenError("Please provide your token")
        try:
            payload = jwt.decode(token, secret, algorithms=[self._algorithm])
        except ExpiredSignatureError:
            raise InvalidTokenError("Token has expired")
        except JWTError:
            raise InvalidTokenError("Invalid Token")
        try:
            return TokenClaims.model_validate(payload)
        except ValidationError:
            raise InvalidTokenError("Invalid Token")

    def issue_for(self, scope: TokenScope, claims: TokenClaims) -> str:
        key = self._keys[scope]
        return self.issue(claims, key.secret, key.ttl)

    def verify_for(self, scope: TokenScope, token: str | None) -> TokenClaims:
        return self.verify(token, self._keys[scope].secret)


def get_token_service() -> TokenService:
    return TokenService.from_settings(get_settings())


async def get_current_claims(
    token: str | None = Depends(oauth2_scheme),
    tokens: TokenService = Depends(get_token_service),
) -> TokenClaims:
    """Resolve the caller from a Bearer access token (claims only, no store read)."""
    return tokens.verify_for(TokenScope.ACCESS, token)


# ------------------------ RBAC helpers ------------------------


def require_roles(allowed: List[Role]) -> Callable:
    """FastAPI dependency factory to enforce role-based access.
    Usage: Depends(require_roles([Role.ADMIN]))
    """

    async def checker(claims: TokenClaims = Depends(get_current_claims)) -> TokenClaims:
        if claims.role not in allowed:
            raise ForbiddenError("Insufficient permissions")
        return claims

    return checker
