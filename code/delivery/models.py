# =============================================================================
#  Discord Delivery
#  Copyright (C) 2025 Discord Delivery contributors
#
#  This source code is released under the GNU Affero General Public License
#  version 3.0. A copy of the license is available at:
#  https://www.gnu.org/licenses/agpl-3.0.en.html
# =============================================================================

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Iterable, Optional

from delivery.components import Component, parse_components, to_payload
from delivery.snowflake import snowflake_time


@dataclass(frozen=True)
class MessageFile:
    name: str
    data: bytes = field(repr=False)
    content_type: Optional[str] = None


@dataclass(frozen=True)
class InformationMessage:
    """A message that should be posted in an information channel."""

    content: Optional[str] = None
    components: tuple[Component, ...] = ()
    files: tuple[MessageFile, ...] = ()
    flags: int = 0

    @classmethod
    def from_dict(
        cls, raw: dict[str, Any], files: Iterable[MessageFile] = ()
    ) -> "InformationMessage":
        return cls(
            content=raw.get("content"),
            components=parse_components(raw.get("components")),
            files=tuple(files),
            flags=int(raw.get("flags") or 0),
        )

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {}
        if self.content is not None:
            payload["content"] = self.content
        if self.components:
            payload["components"] = to_payload(self.components)
        if self.flags:
            payload["flags"] = self.flags
        return payload


@dataclass(frozen=True)
class InformationChannel:
    """A read-only information channel: its id and messages in display order."""

    id: str
    messages: tuple[InformationMessage, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "id", str(self.id))
        object.__setattr__(self, "messages", tuple(self.messages))


@dataclass(frozen=True)
class RemoteMessage:
    id: str
    content: str = ""
    components: tuple[Component, ...] = ()

    @property
    def created_at(self) -> datetime:
        return snowflake_time(self.id)

    @classmethod
    def from_api(cls, raw: dict[str, Any]) -> "RemoteMessage":
        return cls(
            id=str(raw["id"]),
            content=raw.get("content") or "",
            components=parse_components(raw.get("components")),
        )
