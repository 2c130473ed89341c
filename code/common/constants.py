# =============================================================================
#  Discord Delivery
#  Copyright (C) 2025 Discord Delivery contributors
#
#  This source code is released under the GNU Affero General Public License
#  version 3.0. A copy of the license is available at:
#  https://www.gnu.org/licenses/agpl-3.0.en.html
# =============================================================================

"""Shared constants used across Discord Delivery."""

import discord

API_BASE_URL = "https://discord.com/api/v10"

# Page size of a single message fetch. A full page is ambiguous.
FETCH_LIMIT = 100

# Discord refuses bulk deletes of messages older than 14 days.
BULK_DELETE_WINDOW_MS = 1_209_600_000
BULK_DELETE_MIN = 2
BULK_DELETE_MAX = 100

SUPPRESS_EMBEDS = discord.MessageFlags(suppress_embeds=True).value

MAX_COMPONENT_DEPTH = 8

REDACT_KEYS = ("DISCORD_TOKEN",)
