"""Tests for em_common.id_generator and em_common.datetime_utils."""

from datetime import UTC, datetime
from unittest.mock import patch

import pytest

from src.em_common.datetime_utils import iso_or_none, utc_now
from src.em_common.id_generator import ID_WIDTH, SnowflakeIdGenerator, generate_id


class TestSnowflakeIdGenerator:
    def test_returns_str(self) -> None:
        assert isinstance(SnowflakeIdGenerator(machine_id=1).next_id(), str)

    def test_unique_ids(self) -> None:
        gen = SnowflakeIdGenerator(machine_id=1)
        ids = {gen.next_id() for _ in range(1000)}
        assert len(ids) == 1000

    def test_monotonically_increasing(self) -> None:
        gen = SnowflakeIdGenerator(machine_id=1)
        prev = int(gen.next_id())
        for _ in range(100):
            current = int(gen.next_id())
            assert current > prev
            prev = current

    def test_clock_going_backwards_keeps_increasing(self) -> None:
        gen = SnowflakeIdGenerator()
        base = 1_800_000_000_000
        with patch.object(gen, "_current_ms", side_effect=[base, base - 5]):
            first = int(gen.next_id())
            second = int(gen.next_id())
        assert second > first

    def test_fixed_width(self) -> None:
        assert len(SnowflakeIdGenerator().next_id()) == ID_WIDTH

    def test_text_order_survives_digit_count_growth(self) -> None:
        # raw value crosses 10**18 (18 -> 19 digits) about seven years after the epoch
        boundary_ms = SnowflakeIdGenerator._EPOCH_MS + (10**18 >> 22)
        gen = SnowflakeIdGenerator()
        with patch.object(gen, "_current_ms", side_effect=[boundary_ms - 5, boundary_ms + 5]):
            older = gen.next_id()
            newer = gen.next_id()
        assert len(str(int(older))) == 18
        assert len(str(int(newer))) == 19
        assert newer > older
        assert sorted([newer, older], reverse=True) == [newer, older]

    def test_rejects_out_of_range_machine_id(self) -> None:
        with pytest.raises(ValueError):
            SnowflakeIdGenerator(machine_id=1024)

    def test_module_level_helper(self) -> None:
        assert generate_id() != generate_id()


class TestDatetimeUtils:
    def test_utc_now_is_aware(self) -> None:
        now = utc_now()
        assert now.tzinfo == UTC

    def test_iso_or_none(self) -> None:
        assert iso_or_none(None) is None
        assert iso_or_none(datetime(2026, 1, 2, tzinfo=UTC)) == "2026-01-02T00:00:00+00:00"
