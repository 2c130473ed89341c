# =============================================================================
#  Discord Delivery
#  Copyright (C) 2025 Discord Delivery contributors
#
#  This source code is released under the GNU Affero General Public License
#  version 3.0. A copy of the license is available at:
#  https://www.gnu.org/licenses/agpl-3.0.en.html
# =============================================================================

from __future__ import annotations

import time
from datetime import datetime, timedelta, timezone

from discord.utils import DISCORD_EPOCH

from common.constants import BULK_DELETE_WINDOW_MS

_UNIX_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def now_ms() -> int:
    return time.time_ns() // 1_000_000


def timestamp_ms(snowflake: int | str) -> int:
    """Creation time of a snowflake in milliseconds since the Unix epoch."""
    return (int(snowflake) >> 22) + DISCORD_EPOCH


def snowflake_time(snowflake: int | str) -> datetime:
    # discord.utils.snowflake_time goes through a float; stay in integers.
    return _UNIX_EPOCH + timedelta(milliseconds=timestamp_ms(snowflake))


def is_bulk_deletable(message_id: int | str, now: int | None = None) -> bool:
    current = now_ms() if now is None else now
    return current - timestamp_ms(message_id) < BULK_DELETE_WINDOW_MS
