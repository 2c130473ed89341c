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
from typing import Optional, Sequence, Union

from common.constants import SUPPRESS_EMBEDS
from common.logging_setup import ContextAdapter, get_logger
from delivery.batcher import DeletionBatcher
from delivery.errors import GatewayError
from delivery.gateway import MessagingGateway
from delivery.models import InformationChannel, InformationMessage, RemoteMessage


def build_create_payload(message: InformationMessage) -> dict:
    payload = message.to_payload()
    payload["flags"] = SUPPRESS_EMBEDS | message.flags
    payload["allowed_mentions"] = {"parse": []}
    return payload


class Regenerator:
    def __init__(
        self,
        gateway: MessagingGateway,
        *,
        batcher: Optional[DeletionBatcher] = None,
        logger: Optional[Union[logging.Logger, ContextAdapter]] = None,
    ):
        self.gateway = gateway
        self.logger = logger or get_logger("delivery.regenerator")
        self.batcher = batcher or DeletionBatcher(gateway, logger=self.logger)

    async def regenerate(
        self, channel: InformationChannel, messages: Sequence[RemoteMessage]
    ) -> list[str]:
        """
        Replace the channel's content: delete ``messages``, then post the desired
        messages one by one in display order.

        Returns the ids of the messages that were created, in creation order.
        Failed creations are logged and left out, so the list can be shorter
        than ``channel.messages``.
        """
        await self.batcher.delete_all(channel.id, [m.id for m in messages])

        message_ids: list[str] = []
        for index, message in enumerate(channel.messages):
            try:
                message_id = await self.gateway.create_message(
                    channel.id, build_create_payload(message), message.files
                )
            except GatewayError as e:
                self.logger.error(
                    "[⛔] Failed to create message %d in channel %s: %s",
                    index,
                    channel.id,
                    e,
                )
                continue
            message_ids.append(message_id)

        self.logger.info(
            "[📝] Regenerated channel %s: created %d/%d messages",
            channel.id,
            len(message_ids),
            len(channel.messages),
        )
        return message_ids
