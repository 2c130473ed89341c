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
import uuid
from typing import Iterable, Mapping, Optional, Sequence, Union

from common.constants import API_BASE_URL
from common.logging_setup import ContextAdapter, get_logger, run_id_var
from delivery.gateway import DiscordGateway, MessagingGateway
from delivery.models import InformationChannel
from delivery.reconciler import ChannelOutcome, Reconciler


class DiscordDelivery:
    """
    Keeps information channels in line with their declared messages.

    ``data`` is the id map persisted by the previous run; ``start()`` returns
    its replacement.
    """

    def __init__(
        self,
        token: str,
        data: Mapping[str, Sequence[str]],
        information_channels: Iterable[InformationChannel],
        force: bool = False,
        *,
        gateway: Optional[MessagingGateway] = None,
        logger: Optional[Union[logging.Logger, ContextAdapter]] = None,
        base_url: str = API_BASE_URL,
        timeout: float = 15.0,
    ):
        self.data = data
        self.information_channels = tuple(information_channels)
        self.force = bool(force)
        self.logger = logger or get_logger("delivery")
        self._owns_gateway = gateway is None
        self.gateway = gateway or DiscordGateway(token, base_url=base_url, timeout=timeout)
        self.reconciler = Reconciler(self.gateway, force=self.force, logger=self.logger)

    @property
    def outcomes(self) -> dict[str, ChannelOutcome]:
        return self.reconciler.outcomes

    async def start(self) -> dict[str, tuple[str, ...]]:
        token = run_id_var.set(uuid.uuid4().hex[:8])
        try:
            if not self._owns_gateway:
                return await self.reconciler.reconcile(self.data, self.information_channels)
            async with self.gateway:
                return await self.reconciler.reconcile(self.data, self.information_channels)
        finally:
            run_id_var.reset(token)
