import pytest

from banner import BannerConfig
from records import Category, PullRecord

BASE_TS = 1_700_000_000_000


def make_record(
    index: int,
    *,
    rarity: int = 4,
    item_name: str = "",
    is_free: bool = False,
    banner_id: str = "special_1_0_1",
    banner_name: str = "熔火灼痕",
    timestamp: str = None,
    sequence_id: str = None,
    category: Category = Category.CHARACTER,
) -> PullRecord:
    """Build a record; by default each index gets its own second."""
    return PullRecord(
        record_id=f"r{index:05d}",
        banner_id=banner_id,
        banner_name=banner_name,
        item_name=item_name or f"item{rarity}",
        rarity=rarity,
        is_free=is_free,
        pull_timestamp=timestamp if timestamp is not None else str(BASE_TS + index * 1000),
        sequence_id=sequence_id if sequence_id is not None else str(index),
        category=category,
    )


def make_pulls(count: int, start: int = 0, **kwargs) -> list[PullRecord]:
    return [make_record(start + i, **kwargs) for i in range(count)]


def make_session(
    session_index: int, size: int = 10, start: int = 0, rare_at: int = None, **kwargs
) -> list[PullRecord]:
    """Weapon records sharing one timestamp; ``rare_at`` marks one rarity 6 slot."""
    timestamp = str(BASE_TS + session_index * 60_000)
    records = []
    for i in range(size):
        index = start + session_index * 100 + i
        rarity = 6 if i == rare_at else 4
        records.append(
            make_record(
                index,
                rarity=rarity,
                timestamp=timestamp,
                banner_id=kwargs.get("banner_id", "weponbox_1_0_1"),
                banner_name=kwargs.get("banner_name", "武库"),
                item_name=kwargs.get("rare_name", "") if rarity == 6 else "",
                category=Category.WEAPON,
            )
        )
    return records


@pytest.fixture
def up_config() -> BannerConfig:
    return BannerConfig(banner_id="special_1_0_1", up_item_name="X")


@pytest.fixture
def weapon_config() -> BannerConfig:
    return BannerConfig(banner_id="weponbox_1_0_1", up_item_name="W")
