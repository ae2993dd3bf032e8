import pytest

from banner import PityRules
from conftest import BASE_TS, make_record, make_session
from records import Category
from sessions import (
    RewardType,
    aggregate_sessions,
    calculate_session_status,
    next_reward,
    reward_type_at,
)


def _weapon_records(count: int, timestamp: str, start: int = 1000) -> list:
    return [
        make_record(
            start + i,
            timestamp=timestamp,
            banner_id="weponbox_1_0_1",
            category=Category.WEAPON,
        )
        for i in range(count)
    ]


class TestAggregateSessions:
    def test_one_timestamp_one_session(self):
        records = make_session(0) + make_session(1)
        sessions = aggregate_sessions(records)
        assert [len(s.records) for s in sessions] == [10, 10]
        assert [s.session_number for s in sessions] == [1, 2]

    def test_oversized_bucket_folds_remainder(self):
        sessions = aggregate_sessions(_weapon_records(23, str(BASE_TS)))
        assert [len(s.records) for s in sessions] == [10, 13]
        assert [s.session_number for s in sessions] == [1, 2]

    def test_one_extra_record_stays_in_one_session(self):
        sessions = aggregate_sessions(_weapon_records(11, str(BASE_TS)))
        assert [len(s.records) for s in sessions] == [11]

    def test_exact_multiple_is_split_evenly(self):
        sessions = aggregate_sessions(_weapon_records(20, str(BASE_TS)))
        assert [len(s.records) for s in sessions] == [10, 10]

    def test_short_session_is_kept(self):
        sessions = aggregate_sessions(_weapon_records(3, str(BASE_TS)))
        assert [len(s.records) for s in sessions] == [3]

    def test_preserves_all_records(self):
        records = make_session(0) + make_session(1, size=7) + _weapon_records(25, "later")
        sessions = aggregate_sessions(records)
        assert sum(len(s.records) for s in sessions) == len(records)
        assert {r.record_id for s in sessions for r in s.records} == {
            r.record_id for r in records
        }

    def test_sessions_are_chronological(self):
        records = make_session(2) + make_session(0) + make_session(1)
        sessions = aggregate_sessions(records)
        assert [s.timestamp for s in sessions] == sorted(
            {r.pull_timestamp for r in records}
        )

    def test_distinct_timestamp_strings_are_distinct_sessions(self):
        # Same instant, different raw text
        seconds = _weapon_records(10, "1700000000")
        millis = [
            make_record(
                50 + i,
                timestamp="1700000000000",
                banner_id="weponbox_1_0_1",
                category=Category.WEAPON,
            )
            for i in range(10)
        ]
        assert len(aggregate_sessions(seconds + millis)) == 2

    def test_up_classification(self, weapon_config):
        records = make_session(0, rare_at=3, rare_name="W") + make_session(
            1, rare_at=0, rare_name="V"
        )
        sessions = aggregate_sessions(records, weapon_config)
        assert sessions[0].has_rare and sessions[0].has_up_rare
        assert sessions[1].has_rare and not sessions[1].has_up_rare
        assert len(sessions[1].rare_records) == 1
        assert sessions[1].up_rare_records == ()

    def test_reward_type_per_session(self):
        records = []
        for i in range(18):
            records += make_session(i)
        sessions = aggregate_sessions(records)
        assert sessions[9].cumulative_reward_type == RewardType.BOX
        assert sessions[17].cumulative_reward_type == RewardType.UP
        assert sessions[0].cumulative_reward_type == RewardType.NONE

    def test_empty(self):
        assert aggregate_sessions([]) == []


class TestRewardSchedule:
    @pytest.mark.parametrize(
        "session_number, expected",
        [
            (10, RewardType.BOX),
            (18, RewardType.UP),
            (26, RewardType.BOX),
            (34, RewardType.UP),
            (1, RewardType.NONE),
            (17, RewardType.NONE),
            (0, RewardType.NONE),
            (-3, RewardType.NONE),
        ],
    )
    def test_reward_type_at(self, session_number, expected):
        assert reward_type_at(session_number) == expected

    def test_periodic(self):
        for n in range(10, 200):
            assert reward_type_at(n + 16) == reward_type_at(n)

    def test_box_wins_a_tie(self):
        rules = PityRules(box_reward_first=10, up_reward_first=10)
        assert reward_type_at(10, rules) == RewardType.BOX
        assert next_reward(0, rules).reward_type == RewardType.BOX

    @pytest.mark.parametrize(
        "total, reward_type, at, remaining",
        [
            (0, RewardType.BOX, 10, 10),
            (9, RewardType.BOX, 10, 1),
            (10, RewardType.UP, 18, 8),
            (18, RewardType.BOX, 26, 8),
            (26, RewardType.UP, 34, 8),
        ],
    )
    def test_next_reward(self, total, reward_type, at, remaining):
        reward = next_reward(total)
        assert reward.reward_type == reward_type
        assert reward.at_session_number == at
        assert reward.remaining_sessions == remaining


class TestSessionStatus:
    def test_no_sessions(self):
        status = calculate_session_status([])
        assert status.total_sessions == 0
        assert status.sessions_since_last_rare == 0
        assert status.sessions_to_rare_hard_pity == 4
        assert status.sessions_to_up_rare_hard_pity == 8
        assert status.next_cumulative_reward.at_session_number == 10

    def test_counts_sessions_since_last_rare(self, weapon_config):
        records = make_session(0, rare_at=5, rare_name="V") + make_session(1) + make_session(2)
        status = calculate_session_status(aggregate_sessions(records, weapon_config))
        assert status.total_sessions == 3
        assert status.sessions_since_last_rare == 2
        assert status.sessions_to_rare_hard_pity == 2
        assert status.has_up_rare is False
        assert status.sessions_to_up_rare_hard_pity == 5
        assert status.rare_count == 1
        assert status.up_rare_count == 0

    def test_up_rare_clears_up_window(self, weapon_config):
        records = make_session(0) + make_session(1, rare_at=0, rare_name="W")
        status = calculate_session_status(aggregate_sessions(records, weapon_config))
        assert status.sessions_since_last_rare == 0
        assert status.has_up_rare is True
        assert status.sessions_to_up_rare_hard_pity == 0
        assert status.up_rare_count == 1

    def test_remaining_never_negative(self):
        records = []
        for i in range(12):
            records += make_session(i)
        status = calculate_session_status(aggregate_sessions(records))
        assert status.sessions_to_rare_hard_pity == 0
        assert status.sessions_to_up_rare_hard_pity == 0
