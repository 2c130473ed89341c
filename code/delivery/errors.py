# =============================================================================
#  Discord Delivery
#  Copyright (C) 2025 Discord Delivery contributors
#
#  This source code is released under the GNU Affero General Public License
#  version 3.0. A copy of the license is available at:
#  https://www.gnu.org/licenses/agpl-3.0.en.html
# =============================================================================

from __future__ import annotations

from typing import Optional


class GatewayError(Exception):
    """Base class for every failed call against the messaging gateway."""


class GatewayTransportError(GatewayError):
    """The request never produced an HTTP response (connection error, timeout)."""


class GatewayHTTPError(GatewayError):
    def __init__(self, status: int, message: str = "", code: Optional[int] = None):
        self.status = status
        self.code = code
        self.text = message
        detail = f" (error code: {code})" if code is not None else ""
        super().__init__(f"{status}{detail}: {message}" if message else f"{status}{detail}")


class RateLimitedError(GatewayHTTPError):
    def __init__(self, retry_after: float, message: str = "", code: Optional[int] = None):
        self.retry_after = retry_after
        super().__init__(429, message or f"rate limited, retry after {retry_after:.2f}s", code)


class GatewayResponseError(GatewayError):
    """A successful response whose body does not have the expected shape."""
