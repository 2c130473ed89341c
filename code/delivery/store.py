# =============================================================================
#  Discord Delivery
#  Copyright (C) 2025 Discord Delivery contributors
#
#  This source code is released under the GNU Affero General Public License
#  version 3.0. A copy of the license is available at:
#  https://www.gnu.org/licenses/agpl-3.0.en.html
# =============================================================================

from __future__ import annotations

import json
import logging
import mimetypes
import os
from pathlib import Path
from typing import Any, Mapping, Sequence

from common.config import ConfigError
from delivery.models import InformationChannel, InformationMessage, MessageFile

logger = logging.getLogger("delivery.store")


def _read_json(path: Path) -> Any:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ConfigError(f"{path} is not valid JSON: {e}") from e
    except OSError as e:
        raise ConfigError(f"Could not read {path}: {e}") from e


def load_id_map(path: str | os.PathLike) -> dict[str, list[str]]:
    p = Path(path)
    if not p.exists():
        logger.info("[🗂️] No id map at %s yet; starting empty", p)
        return {}
    raw = _read_json(p)
    if not isinstance(raw, dict):
        raise ConfigError(f"{p} must contain a JSON object of channel id -> message ids")
    out: dict[str, list[str]] = {}
    for channel_id, message_ids in raw.items():
        if not isinstance(message_ids, list):
            raise ConfigError(f"{p}: entry for channel {channel_id} must be a list")
        out[str(channel_id)] = [str(m) for m in message_ids]
    return out


def save_id_map(path: str | os.PathLike, data: Mapping[str, Sequence[str]]) -> None:
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    body = {str(k): [str(m) for m in v] for k, v in data.items()}
    tmp = p.with_name(p.name + ".tmp")
    tmp.write_text(json.dumps(body, indent=2) + "\n", encoding="utf-8")
    os.replace(tmp, p)
    logger.debug("Saved id map for %d channels to %s", len(body), p)


def _load_file(entry: dict[str, Any], base_dir: Path) -> MessageFile:
    if not isinstance(entry, dict) or not entry.get("path"):
        raise ConfigError(f"File entry needs a 'path': {entry!r}")
    p = Path(entry["path"])
    if not p.is_absolute():
        p = base_dir / p
    try:
        data = p.read_bytes()
    except OSError as e:
        raise ConfigError(f"Could not read attachment {p}: {e}") from e
    name = entry.get("name") or p.name
    content_type = entry.get("content_type") or mimetypes.guess_type(name)[0]
    return MessageFile(name=name, data=data, content_type=content_type)


def load_information_channels(path: str | os.PathLike) -> list[InformationChannel]:
    """
    Read the desired channels from a JSON array:

        [{"id": "123", "messages": [{"content": "...", "components": [...],
                                     "flags": 32768, "files": [{"path": "rules.png"}]}]}]

    Attachment paths are relative to the channels file.
    """
    p = Path(path)
    raw = _read_json(p)
    if not isinstance(raw, list):
        raise ConfigError(f"{p} must contain a JSON array of channels")

    channels: list[InformationChannel] = []
    for entry in raw:
        if not isinstance(entry, dict) or not entry.get("id"):
            raise ConfigError(f"{p}: every channel needs an 'id': {entry!r}")
        messages = []
        for m in entry.get("messages") or []:
            if not isinstance(m, dict):
                raise ConfigError(f"{p}: channel {entry['id']} has a non-object message")
            files = [_load_file(f, p.parent) for f in m.get("files") or []]
            try:
                messages.append(InformationMessage.from_dict(m, files))
            except ValueError as e:
                raise ConfigError(f"{p}: channel {entry['id']}: {e}") from e
        channels.append(InformationChannel(id=str(entry["id"]), messages=tuple(messages)))
    return channels
