# hive_api/core/security.py
import secrets

from passlib.context import CryptContext

from hive_api.core.config import settings

SESSION_TOKEN_BYTES = 32

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.BCRYPT_ROUNDS,
)

def hash_password(plain: str) -> str:
    return pwd_context.hash(plain)

def verify_password(plain: str, hashed: str) -> bool:
    if not hashed:
        return False
    return pwd_context.verify(plain, hashed)

def new_session_token() -> str:
    # 256 bits de aleatoriedade, url-safe
    return secrets.token_urlsafe(SESSION_TOKEN_BYTES)
