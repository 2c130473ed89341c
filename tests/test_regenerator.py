"""Tests for channel regeneration."""

from unittest.mock import AsyncMock

import pytest

from common.constants import SUPPRESS_EMBEDS
from delivery.models import InformationChannel, InformationMessage, MessageFile, RemoteMessage
from delivery.regenerator import Regenerator, build_create_payload

COMPONENTS_V2 = 1 << 15


def channel(*contents, channel_id="c1"):
    return InformationChannel(
        id=channel_id, messages=tuple(InformationMessage(content=c) for c in contents)
    )


class TestBuildPayload:
    def test_suppresses_embeds_and_mentions(self):
        payload = build_create_payload(InformationMessage(content="@everyone read the rules"))
        assert payload == {
            "content": "@everyone read the rules",
            "flags": SUPPRESS_EMBEDS,
            "allowed_mentions": {"parse": []},
        }

    def test_unions_message_flags(self):
        msg = InformationMessage.from_dict(
            {"flags": COMPONENTS_V2, "components": [{"type": 10, "content": "hi"}]}
        )
        payload = build_create_payload(msg)
        assert payload["flags"] == SUPPRESS_EMBEDS | COMPONENTS_V2
        assert payload["components"] == [{"type": 10, "content": "hi"}]
        assert "content" not in payload


@pytest.mark.asyncio
async def test_deletes_then_creates_in_order(gateway, logger):
    old = [RemoteMessage(id=gateway.new_id(), content="old")]
    gateway.seed("c1", old)

    ids = await Regenerator(gateway, logger=logger).regenerate(channel("a", "b", "c"), old)

    kinds = [c[0] for c in gateway.calls]
    assert kinds == ["delete", "create", "create", "create"]
    assert [c[2]["content"] for c in gateway.calls_of("create")] == ["a", "b", "c"]
    assert len(ids) == 3
    assert ids == sorted(ids, key=int)
    assert [m.content for m in reversed(gateway.history["c1"])] == ["a", "b", "c"]


@pytest.mark.asyncio
async def test_failed_creation_is_skipped(gateway, logger, caplog):
    gateway.fail_create = {1}

    ids = await Regenerator(gateway, logger=logger).regenerate(channel("a", "b", "c"), [])

    assert len(gateway.calls_of("create")) == 3
    assert len(ids) == 2
    assert [m.content for m in reversed(gateway.history["c1"])] == ["a", "c"]
    assert "Failed to create message 1" in caplog.text


@pytest.mark.asyncio
async def test_passes_files(gateway, logger):
    f = MessageFile(name="rules.png", data=b"\x89PNG", content_type="image/png")
    ch = InformationChannel(id="c1", messages=(InformationMessage(content="see", files=(f,)),))

    await Regenerator(gateway, logger=logger).regenerate(ch, [])

    assert gateway.calls_of("create")[0][3] == (f,)


@pytest.mark.asyncio
async def test_uses_given_batcher(gateway, logger):
    batcher = AsyncMock()
    msgs = [RemoteMessage(id="1"), RemoteMessage(id="2")]

    await Regenerator(gateway, batcher=batcher, logger=logger).regenerate(channel("a"), msgs)

    batcher.delete_all.assert_awaited_once_with("c1", ["1", "2"])
