"""Default data creation functions."""

from banner import EndFieldPityRules, PityRules

# Known up items keyed by banner display name
DEFAULT_UP_ITEMS: dict[str, str] = {
    "熔火灼痕": "莱万汀",
    "轻飘飘的信使": "洁尔佩塔",
    "热烈色彩": "伊冯",
}


def create_default_rules() -> PityRules:
    """Create the default pity rules."""
    return EndFieldPityRules.model_copy(deep=True)


def guess_up_item(banner_name: str) -> str:
    """Get the known up item of a banner by its display name, or an empty string."""
    for name, up_item in DEFAULT_UP_ITEMS.items():
        if name and name in banner_name:
            return up_item
    return ""
