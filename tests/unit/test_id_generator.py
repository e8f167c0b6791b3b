"""Tests for p2p_common.id_generator and p2p_common.datetime_utils."""

from datetime import datetime

import pytest

from src.p2p_common.datetime_utils import utc_now
from src.p2p_common.id_generator import SnowflakeIdGenerator, generate_id


class TestSnowflakeIdGenerator:
    def test_returns_str(self) -> None:
        gen = SnowflakeIdGenerator(machine_id=1)
        assert isinstance(gen.next_id(), str)

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

    def test_rejects_out_of_range_machine_id(self) -> None:
        with pytest.raises(ValueError):
            SnowflakeIdGenerator(machine_id=1024)

    def test_module_level_generator(self) -> None:
        assert generate_id() != generate_id()

    def test_fixed_width_ids_sort_as_text(self) -> None:
        gen = SnowflakeIdGenerator(machine_id=3)
        ids = [gen.next_id() for _ in range(50)]
        assert all(len(i) == 20 for i in ids)
        assert sorted(ids) == ids


class TestUtcNow:
    def test_returns_aware_datetime(self) -> None:
        now = utc_now()
        assert isinstance(now, datetime)
        assert now.tzinfo is not None

    def test_is_utc(self) -> None:
        assert utc_now().utcoffset().total_seconds() == 0
