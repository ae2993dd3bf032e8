"""UI components package for the gacha record statistics page."""

from ui.constants import RARITY_COLORS
from ui.defaults import create_default_rules, guess_up_item
from ui.state import initialize_session_state, update_url

__all__ = [
    "initialize_session_state",
    "update_url",
    "RARITY_COLORS",
    "create_default_rules",
    "guess_up_item",
]
