"""Password hashing (bcrypt).

bcrypt is deliberately slow. Request handlers use the `*_async` variants,
which run the work in a thread so the event loop keeps serving.
"""

import asyncio
from functools import lru_cache

import bcrypt

from src.config.settings import settings


def _pwd_bytes(password: str, max_len: int = 72) -> bytes:
    # bcrypt only looks at the first 72 bytes
    return password.encode("utf-8")[:max_len]


class PasswordHasher:
    def __init__(self, rounds: int = 10) -> None:
        self.rounds = rounds

    def hash(self, password: str) -> str:
        return bcrypt.hashpw(_pwd_bytes(password), bcrypt.gensalt(rounds=self.rounds)).decode("utf-8")

    def verify(self, password: str, hashed: str | None) -> bool:
        if not password or not hashed:
            return False
        try:
            return bcrypt.checkpw(_pwd_bytes(password), hashed.encode("utf-8"))
        except ValueError:
            # Not a bcrypt hash
            return False

    async def hash_async(self, password: str) -> str:
        return await asyncio.to_thread(self.hash, password)

    async def verify_async(self, password: str, hashed: str | None) -> bool:
        if not password or not hashed:
            return False
        return await asyncio.to_thread(self.verify, password, hashed)


@lru_cache
def get_password_hasher() -> PasswordHasher:
    return PasswordHasher(rounds=settings.bcrypt_rounds)
