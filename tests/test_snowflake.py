"""Tests for the snowflake clock."""

from datetime import datetime, timezone

from common.constants import BULK_DELETE_WINDOW_MS
from delivery.models import RemoteMessage
from delivery.snowflake import is_bulk_deletable, snowflake_time, timestamp_ms
from fakes import snowflake_at


class TestTimestamp:
    def test_known_snowflake(self):
        # Example id from the Discord API reference.
        assert timestamp_ms(175928847299117063) == 1462015105796

    def test_accepts_string_ids(self):
        assert timestamp_ms("175928847299117063") == timestamp_ms(175928847299117063)

    def test_snowflake_time_is_aware_utc(self):
        dt = snowflake_time("175928847299117063")
        assert dt == datetime(2016, 4, 30, 11, 18, 25, 796000, tzinfo=timezone.utc)

    def test_low_bits_are_ignored(self):
        base = snowflake_at(1_700_000_000_000)
        assert timestamp_ms(int(base) | 0x3FFFFF) == 1_700_000_000_000

    def test_largest_id_keeps_millisecond_precision(self):
        largest = (1 << 64) - 1
        assert timestamp_ms(largest) == (1 << 42) - 1 + 1_420_070_400_000


class TestBulkDeletable:
    def test_young_message(self):
        created = 1_700_000_000_000
        assert is_bulk_deletable(snowflake_at(created), now=created + 1000)

    def test_one_millisecond_inside_window(self):
        created = 1_700_000_000_000
        assert is_bulk_deletable(snowflake_at(created), now=created + BULK_DELETE_WINDOW_MS - 1)

    def test_exactly_window_old_is_not_eligible(self):
        created = 1_700_000_000_000
        assert not is_bulk_deletable(snowflake_at(created), now=created + BULK_DELETE_WINDOW_MS)

    def test_defaults_to_current_time(self):
        assert not is_bulk_deletable(175928847299117063)


class TestRemoteMessageCreatedAt:
    def test_derived_from_id(self):
        message = RemoteMessage(id="175928847299117063", content="hi")
        assert message.created_at == datetime(2016, 4, 30, 11, 18, 25, 796000, tzinfo=timezone.utc)

    def test_follows_generated_snowflake(self):
        message = RemoteMessage(id=snowflake_at(1_700_000_000_123, seq=7))
        assert message.created_at == datetime(2023, 11, 14, 22, 13, 20, 123000, tzinfo=timezone.utc)
