"""Per-banner and per-pool statistics built on top of the pity and session modules."""

import logging
from typing import Iterable, Optional

from pydantic import BaseModel, Field

from banner import (
    BannerConfig,
    BannerConfigLookup,
    EndFieldPityRules,
    PityRules,
    PoolKind,
    is_up_item,
    no_config,
    pool_kind,
)
from pity import (
    FreePullSummary,
    PitySegment,
    PityStatus,
    SpecialMilestones,
    armory_quota,
    calculate_pity_segments,
    calculate_pity_status,
    calculate_shared_pity_status,
    calculate_special_milestones,
    rarity_counts,
    summarize_free_pulls,
)
from records import Category, PullRecord, sort_records
from sessions import (
    DrawSession,
    SessionPoolStatus,
    aggregate_sessions,
    calculate_session_status,
)

logger = logging.getLogger(__name__)


class BannerStats(BaseModel):
    """Statistics of one pull-based banner."""

    banner_id: str
    banner_name: str
    config: Optional[BannerConfig] = Field(default=None)
    total: int = Field(default=0, description="All records, free pulls included")
    segments: tuple[PitySegment, ...] = Field(default=(), description="Newest first")
    current_pity: int = Field(
        default=0, description="Non-free pulls in the open cycle, 0 if none"
    )
    rare_count: int = Field(default=0)
    five_star_count: int = Field(default=0)
    armory_quota: int = Field(default=0, description="Quota from non-free pulls")
    pity_status: PityStatus
    free_pulls: FreePullSummary
    special_milestones: Optional[SpecialMilestones] = Field(
        default=None, description="Only for special banners with known metadata"
    )

    model_config = {"frozen": True}


class WeaponBannerStats(BaseModel):
    """Statistics of one session-based weapon banner."""

    banner_id: str
    banner_name: str
    config: Optional[BannerConfig] = Field(default=None)
    item_count: int = Field(default=0, description="Number of weapon records")
    sessions: tuple[DrawSession, ...] = Field(default=())
    status: SessionPoolStatus

    model_config = {"frozen": True}


class PoolSummary(BaseModel):
    """Totals of one pool kind across all of its banners."""

    total: int = Field(default=0)
    rare_count: int = Field(default=0)
    up_count: int = Field(default=0)
    off_count: int = Field(default=0)
    average_pulls_per_up: Optional[float] = Field(
        default=None, description="None when no up rare was pulled"
    )
    average_pulls_per_rare: Optional[float] = Field(
        default=None, description="None when no rare was pulled"
    )
    counts: dict[int, int] = Field(default_factory=dict)

    model_config = {"frozen": True}


class StatsReport(BaseModel):
    """Everything the statistics page shows, derived from one record list."""

    special: tuple[BannerStats, ...] = Field(default=())
    weapon: tuple[WeaponBannerStats, ...] = Field(default=())
    standard: tuple[BannerStats, ...] = Field(default=())
    beginner: tuple[BannerStats, ...] = Field(default=())
    shared_special_pity: PityStatus
    special_summary: PoolSummary
    weapon_summary: PoolSummary
    standard_summary: PoolSummary

    model_config = {"frozen": True}


def group_by_banner(records: Iterable[PullRecord]) -> dict[str, list[PullRecord]]:
    """Group records by banner id, keeping first-seen banner order."""
    groups: dict[str, list[PullRecord]] = {}
    for record in records:
        groups.setdefault(record.banner_id, []).append(record)
    return groups


def _banner_name(banner_id: str, records: list[PullRecord]) -> str:
    for record in records:
        if record.banner_name:
            return record.banner_name
    return banner_id


def build_banner_stats(
    banner_id: str,
    records: list[PullRecord],
    config: Optional[BannerConfig] = None,
    rules: PityRules = EndFieldPityRules,
) -> BannerStats:
    """Build the statistics of one pull-based banner from its full record set."""
    segments = calculate_pity_segments(records, config, rules)
    non_free = [r for r in records if not r.is_free]
    newest = segments[0] if segments else None
    current_pity = newest.pull_count if newest and newest.rare_record is None else 0

    milestones = None
    if pool_kind(banner_id) == PoolKind.SPECIAL and config is not None:
        milestones = calculate_special_milestones(records, config, rules)

    return BannerStats(
        banner_id=banner_id,
        banner_name=_banner_name(banner_id, records),
        config=config,
        total=len(records),
        segments=tuple(segments),
        current_pity=current_pity,
        rare_count=sum(1 for r in records if r.rarity == rules.rare_rarity),
        five_star_count=sum(1 for r in records if r.rarity == 5),
        armory_quota=armory_quota(non_free),
        pity_status=calculate_pity_status(non_free, config, rules),
        free_pulls=summarize_free_pulls(records, config, rules),
        special_milestones=milestones,
    )


def build_weapon_banner_stats(
    banner_id: str,
    records: list[PullRecord],
    config: Optional[BannerConfig] = None,
    rules: PityRules = EndFieldPityRules,
) -> WeaponBannerStats:
    """Build the statistics of one session-based weapon banner."""
    sessions = aggregate_sessions(records, config, rules)
    return WeaponBannerStats(
        banner_id=banner_id,
        banner_name=_banner_name(banner_id, records),
        config=config,
        item_count=len(records),
        sessions=tuple(sessions),
        status=calculate_session_status(sessions, rules),
    )


def shared_special_pity(
    records: Iterable[PullRecord], rules: PityRules = EndFieldPityRules
) -> PityStatus:
    """Pity shared by all special character banners, free pulls excluded."""
    shared = [
        r
        for r in records
        if r.category == Category.CHARACTER
        and pool_kind(r.banner_id) == PoolKind.SPECIAL
        and not r.is_free
    ]
    return calculate_shared_pity_status(shared, rules)


def _average(values: list[int]) -> Optional[float]:
    if not values:
        return None
    return sum(values) / len(values)


def _summarize_special(
    records: list[PullRecord], lookup: BannerConfigLookup, rules: PityRules
) -> PoolSummary:
    up = 0
    off = 0
    pulls = 0
    pulls_per_up: list[int] = []
    for record in sort_records(records):
        is_rare = record.rarity == rules.rare_rarity
        is_up = is_rare and is_up_item(record.item_name, lookup(record.banner_id))
        if is_rare:
            if is_up:
                up += 1
            else:
                off += 1
        # Pulls toward an up rare carry over across special banners
        if record.is_free:
            continue
        pulls += 1
        if is_up:
            pulls_per_up.append(pulls)
            pulls = 0

    return PoolSummary(
        total=len(records),
        rare_count=up + off,
        up_count=up,
        off_count=off,
        average_pulls_per_up=_average(pulls_per_up),
        counts=rarity_counts(records),
    )


def _summarize_weapon(
    weapon: list[WeaponBannerStats], records: list[PullRecord]
) -> PoolSummary:
    up = 0
    off = 0
    pulls_per_up: list[int] = []
    for stats in weapon:
        for session in stats.sessions:
            up += len(session.up_rare_records)
            off += len(session.rare_records) - len(session.up_rare_records)
        if stats.config is None or stats.config.up_item_name is None:
            continue
        # Pulls toward an up weapon do not carry over between weapon banners
        pulls = 0
        for session in stats.sessions:
            for record in session.records:
                if record.is_free:
                    continue
                pulls += 1
                if record in session.up_rare_records:
                    pulls_per_up.append(pulls)
                    pulls = 0

    return PoolSummary(
        total=len(records),
        rare_count=up + off,
        up_count=up,
        off_count=off,
        average_pulls_per_up=_average(pulls_per_up),
        counts=rarity_counts(records),
    )


def _summarize_standard(records: list[PullRecord], rules: PityRules) -> PoolSummary:
    counts = rarity_counts(records)
    rares = sum(1 for r in records if r.rarity == rules.rare_rarity)
    return PoolSummary(
        total=len(records),
        rare_count=rares,
        off_count=rares,
        average_pulls_per_rare=len(records) / rares if rares > 0 else None,
        counts=counts,
    )


def build_report(
    records: Iterable[PullRecord],
    lookup: BannerConfigLookup = no_config,
    rules: PityRules = EndFieldPityRules,
) -> StatsReport:
    """Build the full statistics report of one account.

    Args:
        records: All records of the account, character and weapon, in any order.
        lookup: Banner metadata lookup by banner id.
        rules: Pity and reward thresholds.

    Returns:
        Per-banner statistics grouped by pool kind plus per-kind summaries.
    """
    records = list(records)
    special_records: list[PullRecord] = []
    weapon_records: list[PullRecord] = []
    standard_records: list[PullRecord] = []
    beginner_records: list[PullRecord] = []
    for record in records:
        kind = pool_kind(record.banner_id)
        if record.category == Category.WEAPON:
            weapon_records.append(record)
        elif kind == PoolKind.SPECIAL:
            special_records.append(record)
        elif kind == PoolKind.STANDARD:
            standard_records.append(record)
        elif kind == PoolKind.BEGINNER:
            beginner_records.append(record)

    skipped = len(records) - (
        len(special_records)
        + len(weapon_records)
        + len(standard_records)
        + len(beginner_records)
    )
    if skipped:
        logger.debug("%d records belong to no known pool kind", skipped)

    def banners(group: list[PullRecord]) -> list[BannerStats]:
        result = [
            build_banner_stats(banner_id, banner_records, lookup(banner_id), rules)
            for banner_id, banner_records in group_by_banner(group).items()
        ]
        result.sort(key=lambda s: s.total, reverse=True)
        return result

    weapon = [
        build_weapon_banner_stats(banner_id, banner_records, lookup(banner_id), rules)
        for banner_id, banner_records in group_by_banner(weapon_records).items()
    ]
    weapon.sort(key=lambda s: s.status.total_sessions, reverse=True)

    return StatsReport(
        special=tuple(banners(special_records)),
        weapon=tuple(weapon),
        standard=tuple(banners(standard_records)),
        beginner=tuple(banners(beginner_records)),
        shared_special_pity=shared_special_pity(records, rules),
        special_summary=_summarize_special(special_records, lookup, rules),
        weapon_summary=_summarize_weapon(weapon, weapon_records),
        standard_summary=_summarize_standard(standard_records, rules),
    )
