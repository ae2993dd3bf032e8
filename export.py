"""Reading the tracker's JSON and CSV exports.

Only reading is supported. Records come back normalized and in file order;
deduplication and persistence belong to the caller.
"""

import json
import logging
from typing import Literal, Union

import pandas as pd
from pydantic import BaseModel, Field, ValidationError

from records import (
    CharacterRecord,
    PullRecord,
    WeaponRecord,
    normalize_records,
    parse_raw_record,
)

logger = logging.getLogger(__name__)


class ExportFormatError(ValueError):
    """The export file cannot be read as a tracker export."""


class ExportData(BaseModel):
    """JSON export. Schema 1 only has character records, schema 2 adds weapon records."""

    schema_version: Literal[1, 2] = Field(..., alias="schemaVersion")
    exported_at: int = Field(default=0, alias="exportedAt")
    accounts: list[dict] = Field(default_factory=list)
    records: list[CharacterRecord] = Field(default_factory=list)
    weapon_records: list[WeaponRecord] = Field(
        default_factory=list, alias="weaponRecords"
    )

    model_config = {"populate_by_name": True}


class ImportResult(BaseModel):
    records: tuple[PullRecord, ...] = Field(default=())
    errors: tuple[str, ...] = Field(
        default=(), description="Rows that were skipped, with the reason"
    )

    model_config = {"frozen": True}


def load_export_json(content: Union[str, bytes]) -> ImportResult:
    """Read a JSON export.

    Raises:
        ExportFormatError: If the content is not JSON, has an unsupported
            schema version or holds malformed records.
    """
    try:
        data = ExportData.model_validate(json.loads(content))
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ExportFormatError(f"Not a JSON file: {e}") from e
    except ValidationError as e:
        raise ExportFormatError(f"Not a valid export: {e}") from e

    records = normalize_records(data.records) + normalize_records(data.weapon_records)
    logger.info(
        "Read %d character and %d weapon records from schema %d export",
        len(data.records),
        len(data.weapon_records),
        data.schema_version,
    )
    return ImportResult(records=tuple(records))


# Unified CSV columns mapped onto the stored record fields
_UNIFIED_CHARACTER_COLUMNS = {"itemId": "charId", "itemName": "charName"}
_UNIFIED_WEAPON_COLUMNS = {
    "itemId": "weaponId",
    "itemName": "weaponName",
    "itemType": "weaponType",
}


def _csv_kind(columns: set[str]) -> str:
    if {"itemId", "itemName", "category"} <= columns:
        return "unified"
    if {"charId", "charName"} <= columns:
        return "character"
    if {"weaponId", "weaponName"} <= columns:
        return "weapon"
    raise ExportFormatError("Unrecognized CSV header, expected a tracker CSV export")


def _row_to_raw(row: dict, kind: str) -> dict:
    # Empty cells fall back to the model defaults
    raw = {key: value for key, value in row.items() if value != ""}
    if kind != "unified":
        raw["category"] = kind
        return raw

    category = raw.get("category", "")
    if category == "character":
        mapping = _UNIFIED_CHARACTER_COLUMNS
        raw.pop("itemType", None)
    elif category == "weapon":
        mapping = _UNIFIED_WEAPON_COLUMNS
        raw.pop("isFree", None)
    else:
        raise ValueError(f"unknown category {category!r}")
    for source, target in mapping.items():
        if source in raw:
            raw[target] = raw.pop(source)
    return raw


def load_export_csv(source) -> ImportResult:
    """Read a character, weapon or unified CSV export.

    Args:
        source: A path or a file-like object, as accepted by ``pandas.read_csv``.

    Returns:
        Normalized records plus one error message per skipped row.

    Raises:
        ExportFormatError: If the file is not a CSV or its header is not one of
            the tracker's export formats.
    """
    try:
        frame = pd.read_csv(
            source, dtype=str, keep_default_na=False, encoding="utf-8-sig"
        )
    except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as e:
        raise ExportFormatError(f"Not a CSV file: {e}") from e

    kind = _csv_kind(set(frame.columns))
    records: list[PullRecord] = []
    errors: list[str] = []
    for index, row in enumerate(frame.to_dict(orient="records"), start=2):
        try:
            raw = parse_raw_record(_row_to_raw(row, kind))
        except (ValueError, ValidationError) as e:
            errors.append(f"line {index}: {e}")
            continue
        records.extend(normalize_records([raw]))

    logger.info(
        "Read %d records from %s CSV export, skipped %d rows",
        len(records),
        kind,
        len(errors),
    )
    return ImportResult(records=tuple(records), errors=tuple(errors))
