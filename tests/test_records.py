import random

import pytest
from pydantic import ValidationError

from conftest import BASE_TS, make_pulls, make_record
from records import (
    Category,
    CharacterRecord,
    WeaponRecord,
    normalize_record,
    parse_raw_record,
    parse_sequence_id,
    parse_timestamp,
    sort_records,
)


class TestParseTimestamp:
    def test_seconds_are_scaled_to_milliseconds(self):
        assert parse_timestamp("1700000000") == 1_700_000_000_000

    def test_milliseconds_are_kept(self):
        assert parse_timestamp("1700000000123") == 1_700_000_000_123

    def test_numbers(self):
        assert parse_timestamp(1_700_000_000) == 1_700_000_000_000
        assert parse_timestamp(1_700_000_000_123) == 1_700_000_000_123

    def test_iso_with_zulu(self):
        assert parse_timestamp("2023-11-14T22:13:20Z") == 1_700_000_000_000

    def test_iso_with_offset(self):
        assert parse_timestamp("2023-11-15T06:13:20+08:00") == 1_700_000_000_000

    @pytest.mark.parametrize(
        "value",
        [None, "", "   ", "yesterday", True, float("nan"), "9" * 400, "9" * 5000, 10**400],
    )
    def test_invalid(self, value):
        assert parse_timestamp(value) is None


class TestParseSequenceId:
    def test_integer(self):
        assert parse_sequence_id("42") == 42

    def test_float(self):
        assert parse_sequence_id("4.5") == 4.5

    @pytest.mark.parametrize("value", [None, "", "abc", "inf", "nan"])
    def test_invalid(self, value):
        assert parse_sequence_id(value) is None


class TestSortRecords:
    def test_orders_by_time_then_sequence_then_id(self):
        a = make_record(1, timestamp="1700000001", sequence_id="2")
        b = make_record(2, timestamp="1700000001", sequence_id="1")
        c = make_record(3, timestamp="1700000000", sequence_id="9")
        assert sort_records([a, b, c]) == [c, b, a]

    def test_mixed_timestamp_formats_compare_numerically(self):
        seconds = make_record(1, timestamp="1700000001")
        iso = make_record(2, timestamp="2023-11-14T22:13:20Z")
        assert sort_records([seconds, iso]) == [iso, seconds]

    def test_unparseable_timestamp_sorts_first(self):
        broken = make_record(1, timestamp="not a time")
        normal = make_record(0)
        assert sort_records([normal, broken]) == [broken, normal]

    def test_invalid_sequence_ids_come_last_within_a_timestamp(self):
        ts = str(BASE_TS)
        numbered = make_record(5, timestamp=ts, sequence_id="7")
        unnumbered_a = make_record(1, timestamp=ts, sequence_id="x")
        unnumbered_b = make_record(2, timestamp=ts, sequence_id="")
        result = sort_records([unnumbered_b, numbered, unnumbered_a])
        assert result == [numbered, unnumbered_a, unnumbered_b]

    def test_oversized_numeric_timestamp_sorts_first(self):
        normal = make_record(0)
        for text in ("9" * 400, "9" * 5000):
            broken = make_record(1, timestamp=text)
            assert sort_records([normal, broken]) == [broken, normal]

    def test_record_id_breaks_full_ties(self):
        ts = str(BASE_TS)
        first = make_record(1, timestamp=ts, sequence_id="3")
        second = make_record(2, timestamp=ts, sequence_id="3")
        assert sort_records([second, first]) == [first, second]

    def test_independent_of_input_order(self):
        records = make_pulls(30)
        records.append(make_record(100, timestamp=records[3].pull_timestamp, sequence_id="?"))
        expected = sort_records(records)
        rng = random.Random(7)
        for _ in range(5):
            shuffled = records[:]
            rng.shuffle(shuffled)
            assert sort_records(shuffled) == expected

    def test_idempotent(self):
        records = make_pulls(10)[::-1]
        once = sort_records(records)
        assert sort_records(once) == once

    def test_does_not_modify_input(self):
        records = make_pulls(5)[::-1]
        before = list(records)
        sort_records(records)
        assert records == before


class TestRawRecords:
    def test_character_record_is_normalized(self):
        raw = parse_raw_record(
            {
                "category": "character",
                "recordUid": "abc",
                "poolId": "special_1_0_1",
                "poolName": "熔火灼痕",
                "charId": "chr_1",
                "charName": "莱万汀",
                "rarity": 6,
                "isFree": True,
                "gachaTs": 1700000000000,
                "seqId": 12,
            }
        )
        assert isinstance(raw, CharacterRecord)
        record = normalize_record(raw)
        assert record.item_name == "莱万汀"
        assert record.is_free is True
        assert record.pull_timestamp == "1700000000000"
        assert record.sequence_id == "12"
        assert record.category == Category.CHARACTER

    def test_weapon_record_is_never_free(self):
        raw = parse_raw_record(
            {
                "category": "weapon",
                "recordUid": "w1",
                "poolId": "weponbox_1_0_1",
                "weaponName": "W",
                "rarity": 6,
            }
        )
        assert isinstance(raw, WeaponRecord)
        record = normalize_record(raw)
        assert record.is_free is False
        assert record.category == Category.WEAPON

    def test_rarity_out_of_range_is_rejected(self):
        with pytest.raises(ValidationError):
            parse_raw_record(
                {
                    "category": "character",
                    "recordUid": "a",
                    "poolId": "special_1_0_1",
                    "charName": "A",
                    "rarity": 7,
                }
            )
