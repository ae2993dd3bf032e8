"""Weapon banner (session-based) display component."""

import pandas as pd
import streamlit as st

from sessions import DrawSession, RewardType
from summary import StatsReport, WeaponBannerStats
from ui.constants import REWARD_LABELS


def _session_result(session: DrawSession) -> str:
    names = []
    for record in session.rare_records:
        if record in session.up_rare_records:
            names.append(f"{record.item_name} (UP)")
        else:
            names.append(record.item_name)
    return ", ".join(names)


def _sessions_frame(sessions: tuple[DrawSession, ...]) -> pd.DataFrame:
    rows = [
        {
            "次数": session.session_number,
            "时间": session.timestamp,
            "条数": len(session.records),
            "6星武器": _session_result(session),
            "累计奖励": REWARD_LABELS[session.cumulative_reward_type.value],
        }
        for session in reversed(sessions)
    ]
    return pd.DataFrame(rows)


def _render_weapon_banner(stats: WeaponBannerStats):
    status = stats.status
    with st.expander(
        f"{stats.banner_name}（{status.total_sessions} 次申领）", expanded=True
    ):
        if stats.config is not None and stats.config.up_item_name:
            st.caption(f"UP: {stats.config.up_item_name}")

        col1, col2, col3 = st.columns(3)
        with col1:
            st.metric(
                "距6星保底",
                f"{status.sessions_to_rare_hard_pity} 次",
                help=f"已连续 {status.sessions_since_last_rare} 次未出6星",
            )
        with col2:
            if status.has_up_rare:
                st.metric("UP保底", "已获得")
            else:
                st.metric("UP保底", f"还差 {status.sessions_to_up_rare_hard_pity} 次")
        with col3:
            reward = status.next_cumulative_reward
            if reward.reward_type == RewardType.NONE:
                st.metric("下个累计奖励", "—")
            else:
                st.metric(
                    f"下个奖励：{REWARD_LABELS[reward.reward_type.value]}",
                    f"还差 {reward.remaining_sessions} 次",
                    help=f"第 {reward.at_session_number} 次申领",
                )

        st.caption(f"6星 {status.rare_count} / UP {status.up_rare_count}")
        if stats.sessions:
            st.dataframe(_sessions_frame(stats.sessions), width="stretch", hide_index=True)


def render_weapon_section(report: StatsReport):
    """Render every weapon banner with its session history."""
    st.header("武库申领")
    if not report.weapon:
        st.info("暂无武器记录")
        return
    for stats in report.weapon:
        _render_weapon_banner(stats)
