"""State management, serialization, and initialization."""

import base64
import io
import json
import zlib

import streamlit as st

from banner import BannerConfig, BannerConfigLookup, PityRules, static_lookup
from export import ImportResult, load_export_csv, load_export_json
from records import PullRecord
from summary import StatsReport, build_report, group_by_banner
from ui.defaults import create_default_rules, guess_up_item


def serialize_state() -> str:
    """Serialize the current settings to a compressed base64 string.

    Records are not part of the shared state, only up items and rules.
    """
    state = {
        "up_items": st.session_state.up_items,
        "rules": st.session_state.rules.model_dump(),
    }
    json_str = json.dumps(state, ensure_ascii=False)
    compressed = zlib.compress(json_str.encode(), level=9)
    return base64.urlsafe_b64encode(compressed).decode()


def deserialize_state(encoded: str) -> dict:
    """Deserialize settings from a compressed base64 string.

    Raises:
        ValueError: If the string does not decode to a settings object.
    """
    compressed = base64.urlsafe_b64decode(encoded.encode())
    state = json.loads(zlib.decompress(compressed).decode())
    if not isinstance(state, dict):
        raise ValueError("Shared state is not an object")
    return state


def update_url():
    """Update URL parameters with current settings."""
    st.query_params["state"] = serialize_state()


def initialize_session_state():
    """Initialize session state from URL or defaults."""
    if "initialized" in st.session_state:
        return
    st.session_state.initialized = True
    st.session_state.records = []
    st.session_state.import_errors = []
    st.session_state.source_name = ""
    st.session_state.expanded_banners = set()
    params = st.query_params
    if "state" in params:
        try:
            state = deserialize_state(params["state"])
            st.session_state.up_items = dict(state.get("up_items", {}))
            st.session_state.rules = PityRules(**state.get("rules", {}))
            return
        except (ValueError, TypeError, zlib.error):
            # Broken share links fall back to defaults
            pass
    _initialize_defaults()


def _initialize_defaults():
    """Initialize settings with default values."""
    st.session_state.up_items = {}
    st.session_state.rules = create_default_rules()


def import_file(name: str, content: bytes) -> ImportResult:
    """Load an uploaded export into the session, replacing the previous records.

    Raises:
        ExportFormatError: If the file is not a tracker export.
    """
    if name.lower().endswith(".csv"):
        result = load_export_csv(io.BytesIO(content))
    else:
        result = load_export_json(content)
    st.session_state.records = list(result.records)
    st.session_state.import_errors = list(result.errors)
    st.session_state.source_name = name
    _fill_known_up_items(st.session_state.records)
    return result


def _fill_known_up_items(records: list[PullRecord]):
    """Pre-fill up items of banners whose display name is known."""
    for banner_id, banner_records in group_by_banner(records).items():
        if st.session_state.up_items.get(banner_id):
            continue
        guessed = guess_up_item(banner_records[0].banner_name)
        if guessed:
            st.session_state.up_items[banner_id] = guessed


def current_lookup() -> BannerConfigLookup:
    """Banner metadata lookup built from the up items entered by the user."""
    return static_lookup(
        BannerConfig(banner_id=banner_id, up_item_name=up_item)
        for banner_id, up_item in st.session_state.up_items.items()
        if up_item
    )


def current_report() -> StatsReport:
    return build_report(
        st.session_state.records, current_lookup(), st.session_state.rules
    )

