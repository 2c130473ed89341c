# =============================================================================
#  Discord Delivery
#  Copyright (C) 2025 Discord Delivery contributors
#
#  This source code is released under the GNU Affero General Public License
#  version 3.0. A copy of the license is available at:
#  https://www.gnu.org/licenses/agpl-3.0.en.html
# =============================================================================

import os
from typing import Optional

from common.constants import API_BASE_URL

CURRENT_VERSION = "v1.0.0"


class ConfigError(Exception):
    """Raised when required configuration or input files are missing or malformed."""


class Config:
    def __init__(self):
        def _str(key: str, env_default: Optional[str] = None) -> Optional[str]:
            v = os.getenv(key)
            if v is None or v.strip() == "":
                v = env_default
            return v

        def _float(key: str, env_default: str = "0") -> float:
            raw = _str(key, env_default)
            try:
                return float(str(raw).strip())
            except ValueError:
                return float(env_default)

        def _bool(key: str, env_default: str = "false") -> bool:
            raw = (_str(key, env_default) or "").strip().lower()
            return raw in ("1", "true", "yes", "y", "on")

        # --- Token / endpoints ---
        self.DISCORD_TOKEN = _str("DISCORD_TOKEN")
        self.API_BASE_URL = (_str("API_BASE_URL", API_BASE_URL) or API_BASE_URL).rstrip("/")
        self.REQUEST_TIMEOUT_SECONDS = _float("REQUEST_TIMEOUT_SECONDS", "15")

        # --- Files ---
        self.DATA_PATH = _str("DATA_PATH", "data/messages.json")
        self.CHANNELS_PATH = _str("CHANNELS_PATH", "data/channels.json")

        # --- Feature flags ---
        self.FORCE = _bool("FORCE", "false")

    def require_token(self) -> str:
        if not self.DISCORD_TOKEN:
            raise ConfigError("DISCORD_TOKEN is not set")
        return self.DISCORD_TOKEN
