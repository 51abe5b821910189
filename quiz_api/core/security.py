from functools import lru_cache
from passlib.context import CryptContext
from quiz_api.core.config import settings

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=settings.BCRYPT_ROUNDS)

def hash_password(plain: str) -> str:
    return pwd_context.hash(plain)

def verify_password(plain: str, hashed: str) -> bool:
    return pwd_context.verify(plain, hashed)

@lru_cache()
def _dummy_hash() -> str:
    return hash_password("dummy-password-for-unknown-accounts")

def verify_against_dummy(plain: str) -> bool:
    """Spend the same hashing work as a real check; always False."""
    verify_password(plain, _dummy_hash())
    return False
