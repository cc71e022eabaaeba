import secrets
import string
from datetime import datetime, timedelta, timezone
from typing import Any, Dict

from jose import JWTError, jwt
from passlib.context import CryptContext

from app.core.config import settings
from app.core.exceptions import UnauthorizedError

ADMIN_TOKEN_TYPE = "admin"
RESPONDER_TOKEN_TYPE = "responder"

_ALPHANUMERIC = string.ascii_letters + string.digits

pwd_context = CryptContext(
    schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=settings.BCRYPT_ROUNDS
)


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    if not hashed_password:
        return False
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except ValueError:
        # Unrecognised or corrupt hash
        return False


def dummy_verify() -> None:
    """Spend one hash verification so a missing account costs as much as a wrong password"""
    pwd_context.dummy_verify()


def generate_secret(length: int) -> str:
    """Random alphanumeric secret from the OS CSPRNG"""
    return "".join(secrets.choice(_ALPHANUMERIC) for _ in range(length))


def _secret_for(token_type: str) -> str:
    if token_type == RESPONDER_TOKEN_TYPE:
        return settings.RESPONDER_SECRET_KEY
    return settings.SECRET_KEY


def create_access_token(
    claims: Dict[str, Any], token_type: str, expires_delta: timedelta
) -> str:
    now = datetime.now(timezone.utc)
    payload = dict(claims)
    payload.update(
        {
            "typ": token_type,
            "iss": settings.JWT_ISSUER,
            "iat": now,
            "nbf": now,
            "exp": now + expires_delta,
        }
    )
    return jwt.encode(
        payload, _secret_for(token_type), algorithm=settings.JWT_ALGORITHM
    )


def decode_access_token(token: str, token_type: str) -> Dict[str, Any]:
    """
    Verify signature, algorithm, expiry and issuer of a bearer token.

    Only the configured HMAC algorithm is accepted, so tokens signed with any
    other scheme (including "none") are rejected. Raises UnauthorizedError.
    """
    try:
        payload = jwt.decode(
            token,
            _secret_for(token_type),
            algorithms=[settings.JWT_ALGORITHM],
            issuer=settings.JWT_ISSUER,
        )
    except JWTError as e:
        raise UnauthorizedError(f"Invalid or expired token: {e}")

    if payload.get("typ") != token_type:
        raise UnauthorizedError("Invalid or expired token: wrong token type")
    return payload


def parse_bearer_header(authorization: str) -> str:
    """Extract the token from an `Authorization: Bearer <token>` header value"""
    if not authorization:
        raise UnauthorizedError("Authorization header is not provided")
    fields = authorization.split()
    if len(fields) < 2:
        raise UnauthorizedError("Invalid authorization header format")
    if fields[0].lower() != "bearer":
        raise UnauthorizedError(f"Unsupported authorization type: {fields[0]}")
    return fields[1]
