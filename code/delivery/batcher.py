# =============================================================================
#  Discord Delivery
#  Copyright (C) 2025 Discord Delivery contributors
#
#  This source code is released under the GNU Affero General Public License
#  version 3.0. A copy of the license is available at:
#  https://www.gnu.org/licenses/agpl-3.0.en.html
# =============================================================================

from __future__ import annotations

import logging
from typing import Callable, Iterable, Optional, Sequence, Union

from common.constants import BULK_DELETE_MAX, BULK_DELETE_MIN
from common.logging_setup import ContextAdapter, get_logger
from delivery.errors import GatewayError
from delivery.gateway import MessagingGateway
from delivery.snowflake import is_bulk_deletable, now_ms


def partition_bulk_deletable(
    message_ids: Iterable[str], now: int
) -> tuple[list[str], list[str]]:
    """Split ids into (bulk_eligible, individual) by age against the bulk-delete window."""
    bulk: list[str] = []
    individual: list[str] = []
    for message_id in message_ids:
        if is_bulk_deletable(message_id, now):
            bulk.append(message_id)
        else:
            individual.append(message_id)
    return bulk, individual


class DeletionBatcher:
    """
    Removes a set of messages from a channel, preferring a bulk delete.

    Discord only bulk deletes between 2 and 100 messages younger than 14 days.
    Anything else, and any batch whose bulk call fails, is deleted one message
    at a time. Every failure is logged and processing continues.
    """

    def __init__(
        self,
        gateway: MessagingGateway,
        *,
        logger: Optional[Union[logging.Logger, ContextAdapter]] = None,
        clock: Callable[[], int] = now_ms,
    ):
        self.gateway = gateway
        self.logger = logger or get_logger("delivery.batcher")
        self.clock = clock

    async def delete_all(
        self, channel_id: str, message_ids: Sequence[str], now: Optional[int] = None
    ) -> None:
        bulk, individual = partition_bulk_deletable(
            message_ids, self.clock() if now is None else now
        )

        for start in range(0, len(bulk), BULK_DELETE_MAX):
            chunk = bulk[start : start + BULK_DELETE_MAX]
            if len(chunk) < BULK_DELETE_MIN:
                individual.extend(chunk)
                continue
            try:
                await self.gateway.bulk_delete(channel_id, chunk)
                self.logger.info(
                    "[🧹] Bulk deleted %d messages in channel %s", len(chunk), channel_id
                )
            except GatewayError as e:
                self.logger.error(
                    "[⛔] Failed to bulk delete messages for channel %s; deleting individually: %s",
                    channel_id,
                    e,
                )
                individual.extend(chunk)

        for message_id in individual:
            try:
                await self.gateway.delete_one(channel_id, message_id)
            except GatewayError as e:
                self.logger.error(
                    "[⛔] Failed to delete message %s in channel %s: %s",
                    message_id,
                    channel_id,
                    e,
                )
