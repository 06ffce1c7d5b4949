# Area: Shared Tests
"""Tests for channel names, ids and timestamps."""

import re
import uuid

from glitch_duel._shared.protocol import (
    display_date,
    epoch_ms,
    generate_game_id,
    get_game_channel_name,
)
from glitch_duel.errors import TransportError


class TestProtocolHelpers:
    """Tests for the shared naming helpers."""

    def test_channel_name(self):
        assert get_game_channel_name("Ada", "Bob") == "Ada - Bob"

    def test_game_ids_are_unique_uuids(self):
        first, second = generate_game_id(), generate_game_id()
        assert first != second
        assert str(uuid.UUID(first)) == first

    def test_epoch_ms(self):
        assert epoch_ms() > 1_600_000_000_000

    def test_display_date_format(self):
        assert re.fullmatch(r"\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}", display_date())


class TestTransportErrorBlock:
    """Tests for the structured error block."""

    def test_block_contains_context(self):
        block = TransportError("Ada - Bob", "publish", "hub offline").format_error_log()
        assert "TRANSPORT_FAILURE" in block
        assert "Ada - Bob" in block
        assert "hub offline" in block
