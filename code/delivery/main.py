# =============================================================================
#  Discord Delivery
#  Copyright (C) 2025 Discord Delivery contributors
#
#  This source code is released under the GNU Affero General Public License
#  version 3.0. A copy of the license is available at:
#  https://www.gnu.org/licenses/agpl-3.0.en.html
# =============================================================================

from __future__ import annotations

import argparse
import asyncio
import sys
from typing import Optional, Sequence

from common.config import Config, ConfigError, CURRENT_VERSION
from common.logging_setup import configure_app_logging, get_logger
from delivery.delivery import DiscordDelivery
from delivery.store import load_id_map, load_information_channels, save_id_map


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="discord-delivery",
        description="Sync Discord information channels with their declared messages.",
    )
    parser.add_argument("--channels", help="Desired channels JSON file (env CHANNELS_PATH)")
    parser.add_argument("--data", help="Persisted message id map (env DATA_PATH)")
    parser.add_argument(
        "--force",
        action="store_true",
        default=None,
        help="Regenerate every channel regardless of its content (env FORCE)",
    )
    parser.add_argument("--log-level", help="DEBUG, INFO, WARNING... (env LOG_LEVEL)")
    parser.add_argument("--version", action="version", version=CURRENT_VERSION)
    return parser


async def run(config: Config, channels_path: str, data_path: str, force: bool) -> int:
    log = get_logger("delivery.main")
    token = config.require_token()
    channels = load_information_channels(channels_path)
    data = load_id_map(data_path)

    log.info("[✨] Discord Delivery %s: %d channels", CURRENT_VERSION, len(channels))
    delivery = DiscordDelivery(
        token,
        data,
        channels,
        force=force,
        base_url=config.API_BASE_URL,
        timeout=config.REQUEST_TIMEOUT_SECONDS,
    )
    result = await delivery.start()
    save_id_map(data_path, result)
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    log = configure_app_logging(level=args.log_level)
    config = Config()

    force = config.FORCE if args.force is None else args.force
    try:
        return asyncio.run(
            run(
                config,
                args.channels or config.CHANNELS_PATH,
                args.data or config.DATA_PATH,
                force,
            )
        )
    except ConfigError as e:
        log.error("[⛔] %s", e)
        return 2


if __name__ == "__main__":
    sys.exit(main())
