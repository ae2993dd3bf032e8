"""Pull records: raw stored shapes, normalization and chronological ordering.

The tracker stores character and weapon pulls in two slightly different
shapes. Both are normalized once into ``PullRecord`` so that the statistics
code never has to care where a record came from.

``sort_records`` is the only definition of "chronological" used by the
statistics modules.
"""

import logging
import math
import re
from datetime import datetime
from enum import Enum
from typing import Annotated, Iterable, Literal, Optional, Union

from pydantic import BaseModel, Field, TypeAdapter, field_validator

logger = logging.getLogger(__name__)


class Category(str, Enum):
    CHARACTER = "character"
    WEAPON = "weapon"


# =============================================================================
# Raw record shapes
# =============================================================================


class _StoredRecord(BaseModel):
    """Fields shared by both stored record shapes (camelCase as exported)."""

    uid: str = Field(default="", description="Local account key")
    record_uid: str = Field(..., alias="recordUid", description="Unique record id")
    fetched_at: int = Field(default=0, alias="fetchedAt")
    pool_id: str = Field(..., alias="poolId", description="Banner id")
    pool_name: str = Field(default="", alias="poolName")
    rarity: int = Field(..., ge=1, le=6)
    is_new: bool = Field(default=False, alias="isNew")
    gacha_ts: str = Field(default="", alias="gachaTs", description="Raw pull time")
    seq_id: str = Field(default="", alias="seqId", description="Raw sequence id")

    model_config = {"populate_by_name": True, "frozen": True}

    @field_validator("gacha_ts", "seq_id", mode="before")
    @classmethod
    def _coerce_to_str(cls, value):
        # Older exports carry numeric timestamps and sequence ids
        if value is None:
            return ""
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value


class CharacterRecord(_StoredRecord):
    """A character banner pull as stored by the tracker."""

    category: Literal["character"] = "character"
    char_id: str = Field(default="", alias="charId")
    char_name: str = Field(..., alias="charName")
    is_free: bool = Field(
        default=False, alias="isFree", description="Promotional free pull"
    )


class WeaponRecord(_StoredRecord):
    """A weapon banner pull as stored by the tracker. Weapon pulls are never free."""

    category: Literal["weapon"] = "weapon"
    weapon_id: str = Field(default="", alias="weaponId")
    weapon_name: str = Field(..., alias="weaponName")
    weapon_type: str = Field(default="", alias="weaponType")


RawRecord = Annotated[
    Union[CharacterRecord, WeaponRecord],
    Field(discriminator="category"),
]

_raw_record_adapter: TypeAdapter = TypeAdapter(RawRecord)


def parse_raw_record(data: dict) -> Union[CharacterRecord, WeaponRecord]:
    """Validate a stored record dict into its tagged shape."""
    return _raw_record_adapter.validate_python(data)


# =============================================================================
# Unified record
# =============================================================================


class PullRecord(BaseModel):
    """A single pull, independent of whether it came from a character or weapon banner."""

    record_id: str = Field(..., description="Unique record id, final ordering tie-break")
    banner_id: str = Field(..., description="Banner (pool) id")
    banner_name: str = Field(default="", description="Banner display name")
    item_name: str = Field(..., description="Character or weapon name")
    item_id: str = Field(default="", description="Character or weapon id")
    rarity: int = Field(..., ge=1, le=6)
    is_new: bool = Field(default=False)
    is_free: bool = Field(default=False, description="Promotional free pull")
    pull_timestamp: str = Field(default="", description="Raw pull time string")
    sequence_id: str = Field(default="", description="Raw sequence id string")
    category: Category = Field(default=Category.CHARACTER)

    model_config = {"frozen": True}


def normalize_record(raw: Union[CharacterRecord, WeaponRecord]) -> PullRecord:
    """Convert a stored record into a ``PullRecord``."""
    if isinstance(raw, CharacterRecord):
        item_name, item_id, is_free = raw.char_name, raw.char_id, raw.is_free
    elif isinstance(raw, WeaponRecord):
        item_name, item_id, is_free = raw.weapon_name, raw.weapon_id, False
    else:
        raise TypeError(f"Unsupported record type: {type(raw).__name__}")
    return PullRecord(
        record_id=raw.record_uid,
        banner_id=raw.pool_id,
        banner_name=raw.pool_name,
        item_name=item_name,
        item_id=item_id,
        rarity=raw.rarity,
        is_new=raw.is_new,
        is_free=is_free,
        pull_timestamp=raw.gacha_ts,
        sequence_id=raw.seq_id,
        category=Category(raw.category),
    )


def normalize_records(
    raws: Iterable[Union[CharacterRecord, WeaponRecord]],
) -> list[PullRecord]:
    return [normalize_record(raw) for raw in raws]


# =============================================================================
# Ordering
# =============================================================================

_DIGITS = re.compile(r"^\d+$")

# Numeric timestamps below this are seconds, otherwise milliseconds
_SECONDS_LIMIT = 10_000_000_000


def _epoch_ms(number: Union[int, float]) -> Optional[float]:
    """Scale an epoch number to milliseconds, None when it is not a finite float."""
    try:
        ms = float(number * 1000 if number < _SECONDS_LIMIT else number)
    except OverflowError:
        return None
    return ms if math.isfinite(ms) else None


def parse_timestamp(value) -> Optional[float]:
    """Parse a pull time into milliseconds since the epoch.

    Accepts second or millisecond epoch numbers (or digit strings), ISO 8601
    strings and ``YYYY-mm-dd HH:MM:SS``. Times without an offset are local time.

    Returns:
        Milliseconds since the epoch, or None when the value cannot be parsed.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return _epoch_ms(value)

    text = str(value).strip()
    if not text:
        return None
    if _DIGITS.match(text):
        try:
            return _epoch_ms(int(text))
        except ValueError:
            # Longer than the int string conversion limit
            return None

    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text).timestamp() * 1000
    except (ValueError, OverflowError, OSError):
        return None


def parse_sequence_id(value) -> Optional[Union[int, float]]:
    """Parse a sequence id into a number, or None when it is not a finite number."""
    if value is None or isinstance(value, bool):
        return None
    text = str(value).strip()
    if not text:
        return None
    try:
        return int(text)
    except ValueError:
        pass
    try:
        number = float(text)
    except ValueError:
        return None
    return number if math.isfinite(number) else None


def timestamp_ms(record: PullRecord) -> float:
    """Pull time of a record in milliseconds; unparseable times count as the epoch."""
    parsed = parse_timestamp(record.pull_timestamp)
    if parsed is None:
        logger.debug(
            "Record %s has unparseable timestamp %r",
            record.record_id,
            record.pull_timestamp,
        )
        return 0.0
    return parsed


def sort_key(record: PullRecord) -> tuple:
    """Total ordering key: time, then numeric sequence id, then record id.

    Records whose sequence id is not a number sort after the numbered records
    of the same timestamp and are then ordered by record id alone.
    """
    sequence = parse_sequence_id(record.sequence_id)
    if sequence is None:
        return (timestamp_ms(record), 1, 0, record.record_id)
    return (timestamp_ms(record), 0, sequence, record.record_id)


def sort_records(records: Iterable[PullRecord]) -> list[PullRecord]:
    """Return a new list of records in chronological order. The input is not modified."""
    return sorted(records, key=sort_key)
