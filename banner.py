from enum import Enum
from typing import Callable, Iterable, Optional

from pydantic import BaseModel, Field


class PoolKind(str, Enum):
    """Kind of pool a banner belongs to, derived from its banner id prefix"""

    SPECIAL = "special"  # Limited character banners, share pity with each other
    STANDARD = "standard"
    BEGINNER = "beginner"
    WEAPON = "weapon"  # Session-based weapon banners
    UNKNOWN = "unknown"


WEAPON_POOL_PREFIXES = ("weponbox", "weaponbox")


def pool_type_prefix(banner_id: str) -> str:
    """Get the lowercase prefix of a banner id, e.g. ``special`` for ``special_1_0_1``."""
    if not banner_id:
        return ""
    return banner_id.lower().split("_")[0]


def is_weapon_pool(banner_id: str) -> bool:
    return pool_type_prefix(banner_id) in WEAPON_POOL_PREFIXES


def pool_kind(banner_id: str) -> PoolKind:
    prefix = pool_type_prefix(banner_id)
    if prefix in WEAPON_POOL_PREFIXES:
        return PoolKind.WEAPON
    try:
        return PoolKind(prefix)
    except ValueError:
        return PoolKind.UNKNOWN


class BannerConfig(BaseModel):
    """Read-only metadata of one banner.

    Only the up item matters for statistics. The metadata itself ships with the
    game client content and is loaded elsewhere.
    """

    banner_id: str = Field(..., description="Banner (pool) id, e.g. special_1_0_1")
    up_item_name: Optional[str] = Field(
        None, description="Name of the rate-up rarity 6 item, None when unknown"
    )
    banner_name: Optional[str] = Field(None, description="Display name of the banner")

    model_config = {"frozen": True}

    def is_up(self, item_name: str) -> bool:
        """Check whether an item is the up item of this banner."""
        return self.up_item_name is not None and self.up_item_name == item_name


BannerConfigLookup = Callable[[str], Optional[BannerConfig]]


def static_lookup(configs: Iterable[BannerConfig]) -> BannerConfigLookup:
    """Build a lookup over a fixed set of banner configs.

    Later configs with the same banner id win.
    """
    by_id = {config.banner_id: config for config in configs}

    def lookup(banner_id: str) -> Optional[BannerConfig]:
        return by_id.get(banner_id)

    return lookup


def no_config(banner_id: str) -> Optional[BannerConfig]:
    """Lookup that knows no banner, every up classification falls back to False."""
    return None


def is_up_item(item_name: str, config: Optional[BannerConfig]) -> bool:
    if config is None:
        return False
    return config.is_up(item_name)


class PityRules(BaseModel):
    """Thresholds of the pity and reward systems.

    These are observed game-balance values, not protocol constants, so they are
    kept configurable. ``EndFieldPityRules`` holds the current values.
    """

    # Pull-based banners
    rare_rarity: int = Field(default=6, description="Rarity that resets the pity")
    soft_pity: int = Field(
        default=65,
        ge=0,
        description="Pulls without a rare after which rare odds start rising",
    )
    hard_pity: int = Field(
        default=80, ge=0, description="Pulls at which a rare is guaranteed"
    )
    up_guarantee: int = Field(
        default=120,
        ge=0,
        description="Pulls on one special banner at which the up item is guaranteed",
    )
    info_book_at: int = Field(
        default=60,
        ge=0,
        description="Pulls on one special banner rewarding the info book (once per banner)",
    )
    token_every: int = Field(
        default=240,
        ge=1,
        description="Pull interval rewarding an extra token of the up item",
    )

    # Session-based banners
    session_size: int = Field(
        default=10, ge=1, description="Nominal number of records per draw session"
    )
    session_overflow: int = Field(
        default=1,
        ge=0,
        description="Extra records a single timestamp bucket may hold before it is split",
    )
    session_rare_hard_pity: int = Field(
        default=4, ge=0, description="Sessions at which a rare is guaranteed"
    )
    session_up_hard_pity: int = Field(
        default=8, ge=0, description="Sessions at which the up item is guaranteed"
    )
    box_reward_first: int = Field(
        default=10, ge=1, description="Session number of the first box reward"
    )
    up_reward_first: int = Field(
        default=18, ge=1, description="Session number of the first up item reward"
    )
    reward_period: int = Field(
        default=16, ge=1, description="Sessions between two rewards of the same type"
    )

    model_config = {"frozen": True}


EndFieldPityRules = PityRules()

# Armory quota granted per record, by rarity
ARMORY_QUOTA_BY_RARITY: dict[int, int] = {6: 2000, 5: 200, 4: 20}
