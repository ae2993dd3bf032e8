"""Statistics of session-based (weapon) banners.

Weapon banners can only be pulled ten at a time. Pity and cumulative rewards
count draw sessions, not single records, so the flat record list is first
grouped back into sessions.
"""

import logging
from enum import Enum
from typing import Iterable, Optional

from pydantic import BaseModel, Field

from banner import BannerConfig, EndFieldPityRules, PityRules, is_up_item
from records import PullRecord, sort_records

logger = logging.getLogger(__name__)


class RewardType(str, Enum):
    """Cumulative reward granted when a session number is reached"""

    BOX = "box"  # Armory supply box
    UP = "up"  # Copy of the up weapon
    NONE = "none"


class NextReward(BaseModel):
    reward_type: RewardType = Field(..., description="Type of the next reward")
    at_session_number: int = Field(..., description="Session number granting it")
    remaining_sessions: int = Field(..., description="Sessions left until it")

    model_config = {"frozen": True}


class DrawSession(BaseModel):
    """One draw session of a session-based banner."""

    session_number: int = Field(..., ge=1, description="1-based, chronological")
    timestamp: str = Field(..., description="Raw pull time shared by the records")
    records: tuple[PullRecord, ...] = Field(default=())
    rare_records: tuple[PullRecord, ...] = Field(default=())
    up_rare_records: tuple[PullRecord, ...] = Field(
        default=(), description="Rare records that are the up item of the banner"
    )
    has_rare: bool = Field(default=False)
    has_up_rare: bool = Field(default=False)
    cumulative_reward_type: RewardType = Field(default=RewardType.NONE)

    model_config = {"frozen": True}


class SessionPoolStatus(BaseModel):
    """Pity and reward progress of a session-based banner, counted in sessions."""

    total_sessions: int = Field(default=0)
    sessions_since_last_rare: int = Field(
        default=0, description="0 when the latest session has a rare"
    )
    sessions_to_rare_hard_pity: int = Field(default=0)
    has_up_rare: bool = Field(default=False)
    sessions_to_up_rare_hard_pity: int = Field(
        default=0, description="0 once the up item was pulled or the window passed"
    )
    rare_count: int = Field(default=0)
    up_rare_count: int = Field(default=0)
    next_cumulative_reward: NextReward

    model_config = {"frozen": True}


# =============================================================================
# Cumulative reward schedule
# =============================================================================


def reward_type_at(session_number: int, rules: PityRules = EndFieldPityRules) -> RewardType:
    """Get the cumulative reward granted by a given session number.

    With the default rules boxes come at 10, 26, 42, ... and up weapons at
    18, 34, 50, ...
    """
    if session_number <= 0:
        return RewardType.NONE
    if _in_progression(session_number, rules.box_reward_first, rules.reward_period):
        return RewardType.BOX
    if _in_progression(session_number, rules.up_reward_first, rules.reward_period):
        return RewardType.UP
    return RewardType.NONE


def _in_progression(n: int, first: int, period: int) -> bool:
    return n >= first and (n - first) % period == 0


def _next_in_progression(n: int, first: int, period: int) -> int:
    """Smallest member of the progression that is >= n."""
    if n <= first:
        return first
    return first + -(-(n - first) // period) * period


def next_reward(total_sessions: int, rules: PityRules = EndFieldPityRules) -> NextReward:
    """Find the first cumulative reward after ``total_sessions``.

    A box wins over an up weapon falling on the same session number.
    """
    upcoming = max(total_sessions, 0) + 1
    next_box = _next_in_progression(upcoming, rules.box_reward_first, rules.reward_period)
    next_up = _next_in_progression(upcoming, rules.up_reward_first, rules.reward_period)
    if next_box <= next_up:
        reward_type, at = RewardType.BOX, next_box
    else:
        reward_type, at = RewardType.UP, next_up
    return NextReward(
        reward_type=reward_type,
        at_session_number=at,
        remaining_sessions=max(0, at - total_sessions),
    )


# =============================================================================
# Session aggregation
# =============================================================================


def _split_bucket(bucket: list[PullRecord], rules: PityRules) -> list[list[PullRecord]]:
    """Split one timestamp bucket into sessions.

    A bucket is normally a single session. Oversized buckets (clock collisions,
    bulk migrations) are cut into sessions of ``session_size`` and an undersized
    remainder is folded into the session before it.
    """
    size = rules.session_size
    if len(bucket) <= size + rules.session_overflow:
        return [bucket]

    chunks = [bucket[i : i + size] for i in range(0, len(bucket), size)]
    if len(chunks) >= 2 and len(chunks[-1]) < size:
        tail = chunks.pop()
        chunks[-1] = chunks[-1] + tail
    logger.debug(
        "Split %d records sharing timestamp %r into %d sessions",
        len(bucket),
        bucket[0].pull_timestamp,
        len(chunks),
    )
    return chunks


def aggregate_sessions(
    records: Iterable[PullRecord],
    config: Optional[BannerConfig] = None,
    rules: PityRules = EndFieldPityRules,
) -> list[DrawSession]:
    """Group the flat records of one session-based banner into draw sessions.

    Records are grouped by their exact raw ``pull_timestamp`` string, not by a
    time window.

    Args:
        records: Full record set of one banner, in any order.
        config: Banner metadata used to spot the up weapon.
        rules: Session size and reward schedule.

    Returns:
        Sessions in chronological order, numbered from 1.
    """
    buckets: dict[str, list[PullRecord]] = {}
    for record in sort_records(records):
        buckets.setdefault(record.pull_timestamp, []).append(record)

    sessions: list[DrawSession] = []
    for timestamp, bucket in buckets.items():
        for chunk in _split_bucket(bucket, rules):
            session_number = len(sessions) + 1
            rares = tuple(r for r in chunk if r.rarity == rules.rare_rarity)
            up_rares = tuple(r for r in rares if is_up_item(r.item_name, config))
            sessions.append(
                DrawSession(
                    session_number=session_number,
                    timestamp=timestamp,
                    records=tuple(chunk),
                    rare_records=rares,
                    up_rare_records=up_rares,
                    has_rare=len(rares) > 0,
                    has_up_rare=len(up_rares) > 0,
                    cumulative_reward_type=reward_type_at(session_number, rules),
                )
            )
    return sessions


def calculate_session_status(
    sessions: list[DrawSession],
    rules: PityRules = EndFieldPityRules,
) -> SessionPoolStatus:
    """Calculate the pity and reward progress of a session-based banner.

    Up classification already happened in ``aggregate_sessions``, so the
    sessions carry everything needed here.
    """
    total = len(sessions)

    since_last_rare = 0
    for session in reversed(sessions):
        if session.has_rare:
            break
        since_last_rare += 1

    has_up_rare = any(s.has_up_rare for s in sessions)
    return SessionPoolStatus(
        total_sessions=total,
        sessions_since_last_rare=since_last_rare,
        sessions_to_rare_hard_pity=max(0, rules.session_rare_hard_pity - since_last_rare),
        has_up_rare=has_up_rare,
        sessions_to_up_rare_hard_pity=(
            0 if has_up_rare else max(0, rules.session_up_hard_pity - total)
        ),
        rare_count=sum(len(s.rare_records) for s in sessions),
        up_rare_count=sum(len(s.up_rare_records) for s in sessions),
        next_cumulative_reward=next_reward(total, rules),
    )
