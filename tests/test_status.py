"""Tests for status notifications."""

import json
from datetime import timedelta
from unittest.mock import MagicMock, patch

from src.schemas.notification import NotificationKind
from src.services.status import StatusReporter, get_sync_redis


class TestGetSyncRedis:
    """Tests for get_sync_redis function."""

    def test_creates_redis_client(self):
        """Test that get_sync_redis creates a Redis client."""
        import src.services.status as status_module

        status_module._sync_redis = None

        with patch("src.services.status.redis.from_url") as mock_from_url:
            mock_client = MagicMock()
            mock_from_url.return_value = mock_client

            result = get_sync_redis()

            assert result == mock_client
            mock_from_url.assert_called_once()

    def test_reuses_existing_client(self, mock_redis):
        """Test that get_sync_redis reuses existing client."""
        with patch("src.services.status.redis.from_url") as mock_from_url:
            result = get_sync_redis()

            assert result == mock_redis
            mock_from_url.assert_not_called()


class TestStatusReporter:
    """Tests for StatusReporter."""

    def test_notify_sets_expiring_key_and_publishes(self):
        """Test that each notification gets its own key with the ttl."""
        redis_client = MagicMock()
        reporter = StatusReporter("categories", redis_client=redis_client)

        notification = reporter.notify(NotificationKind.SUCCESS, "Saved", ttl=3)

        key, ttl, payload = redis_client.setex.call_args[0]
        assert key == f"status:categories:{notification.id}"
        assert ttl == 3
        assert json.loads(payload)["message"] == "Saved"
        redis_client.publish.assert_called_once()
        assert redis_client.publish.call_args[0][0] == "status:categories"

    def test_default_ttl_is_three_seconds(self):
        """Test the default notification lifetime."""
        reporter = StatusReporter("categories", redis_client=MagicMock())

        notification = reporter.error("Failed")

        assert notification.kind == NotificationKind.ERROR
        assert notification.ttl_seconds == 3
        assert notification.expires_at - notification.created_at == timedelta(seconds=3)

    def test_notifications_are_independent(self):
        """Test that repeated messages are not merged."""
        redis_client = MagicMock()
        reporter = StatusReporter("categories", redis_client=redis_client)

        first = reporter.success("Saved")
        second = reporter.success("Saved")

        assert first.id != second.id
        assert redis_client.setex.call_count == 2

    def test_redis_failure_does_not_raise(self):
        """Test that Redis errors don't crash the caller."""
        redis_client = MagicMock()
        redis_client.setex.side_effect = Exception("Redis connection failed")
        reporter = StatusReporter("categories", redis_client=redis_client)

        notification = reporter.success("Saved")

        assert notification.message == "Saved"

    def test_uses_shared_client_by_default(self, mock_redis):
        """Test that reporters without a client publish through the shared one."""
        StatusReporter("categories").success("Saved")

        mock_redis.publish.assert_called_once()

    def test_active_returns_live_notifications(self):
        """Test reading back unexpired notifications."""
        redis_client = MagicMock()
        reporter = StatusReporter("categories", redis_client=redis_client)
        stored = reporter.success("Saved")
        redis_client.scan_iter.return_value = iter([f"status:categories:{stored.id}", "gone"])
        redis_client.mget.return_value = [stored.model_dump_json(), None]

        active = reporter.active()

        assert [n.id for n in active] == [stored.id]
        redis_client.scan_iter.assert_called_once_with(match="status:categories:*")

    def test_active_skips_invalid_payloads(self):
        """Test that garbage in Redis is ignored."""
        redis_client = MagicMock()
        redis_client.scan_iter.return_value = iter(["status:categories:x"])
        redis_client.mget.return_value = [b"not json"]
        reporter = StatusReporter("categories", redis_client=redis_client)

        assert reporter.active() == []

    def test_active_handles_redis_error(self):
        """Test that Redis read errors yield no notifications."""
        redis_client = MagicMock()
        redis_client.scan_iter.side_effect = Exception("Redis connection failed")
        reporter = StatusReporter("categories", redis_client=redis_client)

        assert reporter.active() == []
