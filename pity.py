"""Pity statistics of pull-based banners."""

import logging
from typing import Iterable, Optional

from pydantic import BaseModel, Field

from banner import (
    ARMORY_QUOTA_BY_RARITY,
    BannerConfig,
    EndFieldPityRules,
    PityRules,
    is_up_item,
)
from records import PullRecord, sort_records

logger = logging.getLogger(__name__)


class PityStatus(BaseModel):
    """Snapshot of the pity counters of one banner (or one shared pity pool).

    All counters only count non-free pulls.
    """

    pulls_since_last_rare: int = Field(
        default=0, description="Pulls since the last rarity 6 (pity counter)"
    )
    pulls_since_last_five_star: int = Field(
        default=0, description="Pulls since the last rarity 5 or higher"
    )
    pulls_since_last_up_rare: int = Field(
        default=0, description="Pulls since the last up rarity 6"
    )
    current_streak: int = Field(default=0, description="Same as pulls_since_last_rare")
    in_odds_boost_zone: bool = Field(
        default=False, description="Pity counter reached the soft pity"
    )
    hard_pity_reached: bool = Field(
        default=False, description="Pity counter reached the hard pity"
    )
    last_rare_was_up: Optional[bool] = Field(
        default=None,
        description="Whether the last rarity 6 was the up item, None when unknown or no rare yet",
    )
    has_rare_in_banner: bool = Field(
        default=False, description="Whether a non-free rarity 6 was pulled"
    )

    model_config = {"frozen": True}


class FreePullSummary(BaseModel):
    """Promotional free pulls of one banner, kept apart from the pity statistics."""

    has_free_pulls: bool = Field(default=False)
    free_rare_pull: Optional[PullRecord] = Field(
        default=None, description="Latest rarity 6 among the free pulls"
    )
    was_free_rare_up: bool = Field(default=False)
    free_pull_count: int = Field(default=0)

    model_config = {"frozen": True}


class PitySegment(BaseModel):
    """One rarity 6 cycle of a banner: the pulls spent until a rare came out.

    The newest segment may be open (no ``rare_record`` yet).
    """

    pull_count: int = Field(default=0, description="Non-free pulls in this cycle")
    rare_record: Optional[PullRecord] = Field(
        default=None, description="The rarity 6 that closed this cycle"
    )
    is_up: Optional[bool] = Field(
        default=None, description="Whether the closing rare was the up item"
    )
    five_star_records: tuple[PullRecord, ...] = Field(
        default=(), description="Non-free rarity 5 pulls inside this cycle"
    )
    includes_free: bool = Field(
        default=False, description="Whether free pulls happened inside this cycle"
    )
    free_pull_count: int = Field(default=0, description="Free pulls inside this cycle")

    model_config = {"frozen": True}


class SpecialMilestones(BaseModel):
    """Per-banner milestones of a special banner, counting non-free pulls only."""

    non_free_pulls: int = Field(default=0)
    has_up_rare: bool = Field(default=False)
    pulls_to_up_guarantee: int = Field(
        default=0, description="Pulls left until the up item is guaranteed"
    )
    has_info_book: bool = Field(default=False)
    pulls_to_info_book: int = Field(default=0)
    token_times: int = Field(default=0, description="Up item tokens earned so far")
    pulls_to_next_token: int = Field(default=0)

    model_config = {"frozen": True}


def _walk_pity(
    records: Iterable[PullRecord],
    config: Optional[BannerConfig],
    classify_up: bool,
    rules: PityRules,
) -> PityStatus:
    """Replay the records in chronological order and return the final counters."""
    rare_pity = 0
    five_star_pity = 0
    up_rare_pity = 0
    last_rare_was_up: Optional[bool] = None
    has_rare = False
    skipped_free = 0

    for record in sort_records(records):
        # Free pulls neither advance nor reset any counter
        if record.is_free:
            skipped_free += 1
            continue

        rare_pity += 1
        five_star_pity += 1
        up_rare_pity += 1

        if record.rarity >= 5:
            five_star_pity = 0

        if record.rarity == rules.rare_rarity:
            has_rare = True
            rare_pity = 0
            if classify_up:
                is_up = is_up_item(record.item_name, config)
                last_rare_was_up = is_up
                if is_up:
                    up_rare_pity = 0

    if skipped_free:
        logger.debug("Skipped %d free pulls while counting pity", skipped_free)

    return PityStatus(
        pulls_since_last_rare=rare_pity,
        pulls_since_last_five_star=five_star_pity,
        pulls_since_last_up_rare=up_rare_pity if classify_up else 0,
        current_streak=rare_pity,
        in_odds_boost_zone=rare_pity >= rules.soft_pity,
        hard_pity_reached=rare_pity >= rules.hard_pity,
        last_rare_was_up=last_rare_was_up,
        has_rare_in_banner=has_rare,
    )


def calculate_pity_status(
    records: Iterable[PullRecord],
    config: Optional[BannerConfig] = None,
    rules: PityRules = EndFieldPityRules,
) -> PityStatus:
    """Calculate the pity status of a single banner.

    Args:
        records: Records of exactly one banner, in any order.
        config: Banner metadata used to tell up rares from off-banner rares.
            Without it every rare counts as off-banner.
        rules: Pity thresholds.

    Returns:
        The counters after the latest pull.
    """
    return _walk_pity(records, config, classify_up=True, rules=rules)


def calculate_shared_pity_status(
    records: Iterable[PullRecord],
    rules: PityRules = EndFieldPityRules,
) -> PityStatus:
    """Calculate a pity counter pooled across several banners.

    No up classification is done: ``last_rare_was_up`` stays None and
    ``pulls_since_last_up_rare`` stays 0. Free pulls are skipped even though
    callers are expected to have removed them already.
    """
    return _walk_pity(records, None, classify_up=False, rules=rules)


def summarize_free_pulls(
    records: Iterable[PullRecord],
    config: Optional[BannerConfig] = None,
    rules: PityRules = EndFieldPityRules,
) -> FreePullSummary:
    """Summarize the free pulls of one banner's full record set."""
    free_records = sort_records(r for r in records if r.is_free)
    free_rares = [r for r in free_records if r.rarity == rules.rare_rarity]
    free_rare = free_rares[-1] if free_rares else None
    return FreePullSummary(
        has_free_pulls=len(free_records) > 0,
        free_rare_pull=free_rare,
        was_free_rare_up=(
            is_up_item(free_rare.item_name, config) if free_rare is not None else False
        ),
        free_pull_count=len(free_records),
    )


def calculate_pity_segments(
    records: Iterable[PullRecord],
    config: Optional[BannerConfig] = None,
    rules: PityRules = EndFieldPityRules,
) -> list[PitySegment]:
    """Split a banner's history into rarity 6 cycles, newest first.

    Free pulls never count toward a cycle and never close one; they are only
    reported through ``includes_free`` / ``free_pull_count``. The trailing open
    cycle is included when it holds at least one non-free pull.
    """
    segments: list[PitySegment] = []
    pulls = 0
    free_pulls = 0
    five_stars: list[PullRecord] = []

    for record in sort_records(records):
        if record.is_free:
            free_pulls += 1
            continue

        pulls += 1
        if record.rarity == 5:
            five_stars.append(record)

        if record.rarity == rules.rare_rarity:
            segments.append(
                PitySegment(
                    pull_count=pulls,
                    rare_record=record,
                    is_up=is_up_item(record.item_name, config),
                    five_star_records=tuple(five_stars),
                    includes_free=free_pulls > 0,
                    free_pull_count=free_pulls,
                )
            )
            pulls = 0
            free_pulls = 0
            five_stars = []

    if pulls > 0:
        segments.append(
            PitySegment(
                pull_count=pulls,
                five_star_records=tuple(five_stars),
                includes_free=free_pulls > 0,
                free_pull_count=free_pulls,
            )
        )

    segments.reverse()
    return segments


def calculate_special_milestones(
    records: Iterable[PullRecord],
    config: Optional[BannerConfig] = None,
    rules: PityRules = EndFieldPityRules,
) -> SpecialMilestones:
    """Calculate the per-banner milestones of a special banner."""
    non_free = [r for r in records if not r.is_free]
    pulls = len(non_free)
    has_up_rare = any(
        r.rarity == rules.rare_rarity and is_up_item(r.item_name, config)
        for r in non_free
    )
    token_times = pulls // rules.token_every
    return SpecialMilestones(
        non_free_pulls=pulls,
        has_up_rare=has_up_rare,
        pulls_to_up_guarantee=0 if has_up_rare else max(0, rules.up_guarantee - pulls),
        has_info_book=pulls >= rules.info_book_at,
        pulls_to_info_book=max(0, rules.info_book_at - pulls),
        token_times=token_times,
        pulls_to_next_token=(token_times + 1) * rules.token_every - pulls,
    )


def rarity_counts(records: Iterable[PullRecord]) -> dict[int, int]:
    """Count records of rarity 3 to 6. Other rarities are ignored."""
    counts = {3: 0, 4: 0, 5: 0, 6: 0}
    for record in records:
        if record.rarity in counts:
            counts[record.rarity] += 1
    return counts


def armory_quota(records: Iterable[PullRecord]) -> int:
    """Total armory quota earned by the given records."""
    return sum(ARMORY_QUOTA_BY_RARITY.get(record.rarity, 0) for record in records)
