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
import time
from enum import Enum
from typing import Iterable, Mapping, Optional, Sequence, Union

from common.constants import FETCH_LIMIT
from common.logging_setup import ContextAdapter, get_logger, scope_var
from delivery.components import is_components_different
from delivery.errors import GatewayError
from delivery.gateway import MessagingGateway
from delivery.models import InformationChannel, InformationMessage, RemoteMessage
from delivery.regenerator import Regenerator


class ChannelOutcome(Enum):
    MATCH = "match"
    REGENERATE = "regenerate"
    SKIP = "skip"


class ResultBuilder:
    """Starts from the previously persisted id map; only regenerated channels are replaced."""

    def __init__(self, prior: Mapping[str, Sequence[str]]):
        self._entries: dict[str, tuple[str, ...]] = {
            str(channel_id): tuple(message_ids)
            for channel_id, message_ids in prior.items()
        }

    def replace(self, channel_id: str, message_ids: Iterable[str]) -> None:
        self._entries[str(channel_id)] = tuple(message_ids)

    def build(self) -> dict[str, tuple[str, ...]]:
        return dict(self._entries)


class Reconciler:
    def __init__(
        self,
        gateway: MessagingGateway,
        *,
        force: bool = False,
        regenerator: Optional[Regenerator] = None,
        logger: Optional[Union[logging.Logger, ContextAdapter]] = None,
    ):
        self.gateway = gateway
        self.force = bool(force)
        self.logger = logger or get_logger("delivery.reconciler")
        self.regenerator = regenerator or Regenerator(gateway, logger=self.logger)
        self.outcomes: dict[str, ChannelOutcome] = {}

    async def reconcile(
        self,
        data: Mapping[str, Sequence[str]],
        channels: Iterable[InformationChannel],
    ) -> dict[str, tuple[str, ...]]:
        """
        Bring every channel in line with its desired messages, one channel at a time.

        Returns a full replacement for ``data``: channels that were regenerated
        carry their new message ids, every other entry is passed through as is.
        """
        builder = ResultBuilder(data)
        self.outcomes = {}

        for channel in channels:
            token = scope_var.set(f"channel:{channel.id}")
            started = time.perf_counter()
            try:
                outcome, message_ids = await self.reconcile_channel(channel)
            finally:
                scope_var.reset(token)
            self.outcomes[channel.id] = outcome
            if outcome is ChannelOutcome.REGENERATE:
                builder.replace(channel.id, message_ids)
            self.logger.debug(
                "Channel %s finished",
                channel.id,
                extra={
                    "channel_id": channel.id,
                    "outcome": outcome.value,
                    "took_ms": int((time.perf_counter() - started) * 1000),
                },
            )

        counts = {o: 0 for o in ChannelOutcome}
        for outcome in self.outcomes.values():
            counts[outcome] += 1
        self.logger.info(
            "[📊] Reconciled %d channels: %d regenerated, %d unchanged, %d skipped",
            len(self.outcomes),
            counts[ChannelOutcome.REGENERATE],
            counts[ChannelOutcome.MATCH],
            counts[ChannelOutcome.SKIP],
        )
        return builder.build()

    async def reconcile_channel(
        self, channel: InformationChannel
    ) -> tuple[ChannelOutcome, list[str]]:
        self.logger.info("[🔎] Checking channel %s", channel.id)
        try:
            messages = await self.gateway.get_recent_messages(channel.id, limit=FETCH_LIMIT)
        except GatewayError as e:
            self.logger.error(
                "[⛔] Failed to fetch messages for channel %s: %s", channel.id, e
            )
            return ChannelOutcome.SKIP, []

        outcome = self.decide(channel, messages)
        if outcome is not ChannelOutcome.REGENERATE:
            return outcome, []

        message_ids = await self.regenerator.regenerate(channel, messages)
        return outcome, message_ids

    def decide(
        self, channel: InformationChannel, messages: Sequence[RemoteMessage]
    ) -> ChannelOutcome:
        """Classify a channel from its fetched messages (newest-first, as Discord returns them)."""
        # A full page means older messages may exist beyond it.
        if len(messages) == FETCH_LIMIT:
            self.logger.error(
                "[⚠️] %d messages fetched for channel %s; this is not expected, skipping",
                FETCH_LIMIT,
                channel.id,
            )
            return ChannelOutcome.SKIP

        if self.force:
            self.logger.info("[♻️] Forcing regeneration of channel %s", channel.id)
            return ChannelOutcome.REGENERATE

        if len(messages) != len(channel.messages):
            self.logger.info(
                "[♻️] Channel %s has %d messages, expected %d; regenerating",
                channel.id,
                len(messages),
                len(channel.messages),
            )
            return ChannelOutcome.REGENERATE

        for remote, local in zip(reversed(messages), channel.messages):
            if self._is_message_different(remote, local):
                return ChannelOutcome.REGENERATE

        self.logger.info("[✅] No changes found in channel %s", channel.id)
        return ChannelOutcome.MATCH

    def _is_message_different(self, remote: RemoteMessage, local: InformationMessage) -> bool:
        # An empty remote body matches a desired message without content.
        if not (remote.content == "" and not local.content):
            if remote.content != local.content:
                self.logger.info(
                    "[♻️] Content of message %s differs; regenerating", remote.id
                )
                self.logger.info("Old: %s", remote.content)
                self.logger.info("New: %s", local.content)
                return True

        if is_components_different(remote.components, local.components):
            self.logger.info(
                "[♻️] Components of message %s differ; regenerating", remote.id
            )
            return True

        return False
