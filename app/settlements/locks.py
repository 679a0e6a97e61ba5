"""
Redis-based locking for seller onboarding.

Two workers resolving the same Mirakl shop at the same time must not both
create a Stripe account for it. Account mapping creation is therefore
serialized per shop with a DistributedLock; the unique constraint on
AccountMapping.marketplace_shop_id backs it up at the database level.

Usage:
    from settlements.locks import DistributedLock

    with DistributedLock.for_shop(shop.id):
        mapping = AccountMapping.objects.get_for_shop(shop.id)
        if mapping is None:
            mapping = create_mapping(shop)
"""

from __future__ import annotations

import time
import uuid as uuid_module
from typing import TYPE_CHECKING

from django.conf import settings

from django_redis import get_redis_connection

from settlements.exceptions import LockAcquisitionError

if TYPE_CHECKING:
    from typing import Any

    from redis import Redis


class DistributedLock:
    """
    Redis lock using SET NX EX with a per-holder token.

    The TTL bounds how long a crashed worker can keep the lock. Release
    only deletes the key if the stored token is ours, so a lock that
    expired and was taken by someone else is left alone.

    Args:
        key: Lock identifier (prefixed with "lock:")
        ttl: Seconds before Redis drops the lock on its own
        blocking: Wait for the lock instead of failing immediately
        timeout: Maximum wait in seconds when blocking
    """

    RELEASE_SCRIPT = """
    if redis.call("get", KEYS[1]) == ARGV[1] then
        return redis.call("del", KEYS[1])
    else
        return 0
    end
    """

    POLL_INTERVAL = 0.05

    def __init__(
        self,
        key: str,
        ttl: int = 30,
        blocking: bool = True,
        timeout: float = 10.0,
    ) -> None:
        self.key = f"lock:{key}"
        self.ttl = ttl
        self.blocking = blocking
        self.timeout = timeout
        self._token: str | None = None
        self._redis: Redis | None = None

    @classmethod
    def for_shop(cls, shop_id: int, **kwargs) -> DistributedLock:
        """Lock guarding account mapping creation for one Mirakl shop."""
        kwargs.setdefault("ttl", settings.ACCOUNT_MAPPING_LOCK_TTL)
        kwargs.setdefault("timeout", settings.ACCOUNT_MAPPING_LOCK_TIMEOUT)
        return cls(f"account_mapping:shop:{shop_id}", **kwargs)

    def _get_redis(self) -> Redis:
        if self._redis is None:
            self._redis = get_redis_connection("default")
        return self._redis

    def acquire(self) -> bool:
        """
        Acquire the lock.

        Returns:
            True once the lock is held

        Raises:
            LockAcquisitionError: If the lock is held elsewhere (non-blocking)
                or could not be taken within ``timeout`` (blocking)
        """
        self._token = str(uuid_module.uuid4())
        redis = self._get_redis()

        if not self.blocking:
            if self._try_acquire(redis):
                return True
            self._token = None
            raise LockAcquisitionError(
                f"Lock '{self.key}' is already held",
                details={"key": self.key},
            )

        deadline = time.monotonic() + self.timeout
        while True:
            if self._try_acquire(redis):
                return True
            if time.monotonic() >= deadline:
                break
            time.sleep(self.POLL_INTERVAL)

        self._token = None
        raise LockAcquisitionError(
            f"Failed to acquire lock '{self.key}' within {self.timeout}s",
            details={"key": self.key, "timeout": self.timeout},
        )

    def _try_acquire(self, redis: Redis) -> bool:
        return bool(redis.set(self.key, self._token, nx=True, ex=self.ttl))

    def release(self) -> bool:
        """
        Release the lock if we still own it.

        Returns:
            True if the key was deleted, False otherwise. Safe to call twice.
        """
        if self._token is None:
            return False

        result = self._get_redis().eval(self.RELEASE_SCRIPT, 1, self.key, self._token)
        self._token = None
        return bool(result)

    @property
    def is_held(self) -> bool:
        return self._token is not None

    def __enter__(self) -> DistributedLock:
        self.acquire()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> bool:
        self.release()
        return False


__all__ = ["DistributedLock"]
