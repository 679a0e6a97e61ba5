"""
Tests for distributed locking utilities.

Tests the DistributedLock class which serializes account mapping creation
for a Mirakl shop across workers.
"""

import pytest
from django.test import override_settings

from settlements.exceptions import LockAcquisitionError
from settlements.locks import DistributedLock


class TestDistributedLock:
    """Tests for DistributedLock class."""

    def test_acquire_success(self, mock_redis):
        """Should acquire lock when available."""
        lock = DistributedLock("test:key", ttl=30, blocking=False)
        result = lock.acquire()

        assert result is True
        assert lock.is_held is True
        call_args = mock_redis.set.call_args
        assert call_args[0][0] == "lock:test:key"
        assert call_args[1]["nx"] is True
        assert call_args[1]["ex"] == 30

    def test_each_acquisition_uses_its_own_token(self, mock_redis):
        lock1 = DistributedLock("test:key1", blocking=False)
        lock2 = DistributedLock("test:key2", blocking=False)

        lock1.acquire()
        lock2.acquire()

        assert lock1._token != lock2._token

    def test_acquire_non_blocking_raises_when_held(self, mock_redis):
        """Non-blocking mode should raise immediately if lock unavailable."""
        mock_redis.set.return_value = False

        lock = DistributedLock("test:key", blocking=False)

        with pytest.raises(LockAcquisitionError) as exc_info:
            lock.acquire()

        assert "already held" in str(exc_info.value)
        assert exc_info.value.details["key"] == "lock:test:key"
        assert lock.is_held is False
        assert mock_redis.set.call_count == 1

    def test_acquire_blocking_waits_and_acquires(self, mock_redis):
        """Blocking mode should poll until the lock is free."""
        mock_redis.set.side_effect = [False, False, True]

        lock = DistributedLock("test:key", blocking=True, timeout=1.0)

        assert lock.acquire() is True
        assert mock_redis.set.call_count == 3

    def test_acquire_blocking_timeout_raises_error(self, mock_redis):
        mock_redis.set.return_value = False

        lock = DistributedLock("test:key", blocking=True, timeout=0.1)

        with pytest.raises(LockAcquisitionError) as exc_info:
            lock.acquire()

        assert exc_info.value.error_code == "LOCK_ACQUISITION_FAILED"
        assert exc_info.value.details["timeout"] == 0.1
        assert lock.is_held is False

    def test_release_runs_token_checked_script(self, mock_redis):
        """Release should only delete the key holding our token."""
        lock = DistributedLock("test:key", blocking=False)
        lock.acquire()
        token = lock._token

        assert lock.release() is True

        mock_redis.eval.assert_called_once_with(
            DistributedLock.RELEASE_SCRIPT, 1, "lock:test:key", token
        )
        assert lock.is_held is False

    def test_release_when_lock_expired_returns_false(self, mock_redis):
        mock_redis.eval.return_value = 0

        lock = DistributedLock("test:key", blocking=False)
        lock.acquire()

        assert lock.release() is False

    def test_release_twice_is_noop(self, mock_redis):
        lock = DistributedLock("test:key", blocking=False)
        lock.acquire()
        lock.release()

        assert lock.release() is False
        assert mock_redis.eval.call_count == 1

    def test_context_manager_releases_on_error(self, mock_redis):
        """The lock is released when the block raises."""
        with pytest.raises(RuntimeError):
            with DistributedLock("test:key", blocking=False) as lock:
                assert lock.is_held is True
                raise RuntimeError("boom")

        mock_redis.eval.assert_called_once()

    @override_settings(ACCOUNT_MAPPING_LOCK_TTL=45, ACCOUNT_MAPPING_LOCK_TIMEOUT=2.5)
    def test_for_shop_uses_settings(self, mock_redis):
        lock = DistributedLock.for_shop(2001)

        assert lock.key == "lock:account_mapping:shop:2001"
        assert lock.ttl == 45
        assert lock.timeout == 2.5

    def test_for_shop_explicit_arguments_win(self, mock_redis):
        lock = DistributedLock.for_shop(2001, ttl=5, blocking=False)

        assert lock.ttl == 5
        assert lock.blocking is False
