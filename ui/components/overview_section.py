"""Overview tiles and shared pity component."""

from typing import Optional

import pandas as pd
import streamlit as st

from pity import PityStatus
from summary import PoolSummary, StatsReport
from ui.constants import POOL_TAB_LABELS, RARITY_COLORS


def _format_average(value: Optional[float]) -> str:
    if value is None:
        return "—"
    return f"{value:.1f}"


def _render_summary_tile(title: str, summary: PoolSummary, metric_label: str, metric):
    with st.container(border=True):
        st.markdown(f"**{title}**")
        st.caption(f"共 {summary.total} 抽")
        col1, col2 = st.columns(2)
        with col1:
            st.metric("6星", summary.rare_count, help=f"其中歪 {summary.off_count}")
        with col2:
            st.metric(metric_label, _format_average(metric))
        counts = " / ".join(
            f"<span style='color:{RARITY_COLORS[r]}'>{r}星 {summary.counts.get(r, 0)}</span>"
            for r in (6, 5, 4)
        )
        st.markdown(counts, unsafe_allow_html=True)


def render_pity_metrics(status: PityStatus, rules):
    """Render the counters of one pity status as a row of metrics."""
    col1, col2, col3 = st.columns(3)
    with col1:
        st.metric(
            "已垫抽数",
            status.pulls_since_last_rare,
            help=f"距6星保底还差 {max(0, rules.hard_pity - status.pulls_since_last_rare)} 抽",
        )
    with col2:
        st.metric("距上次5星", status.pulls_since_last_five_star)
    with col3:
        if status.last_rare_was_up is None:
            last = "—"
        else:
            last = "UP" if status.last_rare_was_up else "歪"
        st.metric("上次6星", last)
    if status.hard_pity_reached:
        st.error("已到6星保底")
    elif status.in_odds_boost_zone:
        st.warning("处于6星概率提升区")


def render_overview_section(report: StatsReport):
    """Render the per-pool summary tiles and the shared special pity."""
    st.header("总览")
    col1, col2, col3 = st.columns(3)
    with col1:
        _render_summary_tile(
            POOL_TAB_LABELS["special"],
            report.special_summary,
            "平均UP抽数",
            report.special_summary.average_pulls_per_up,
        )
    with col2:
        _render_summary_tile(
            POOL_TAB_LABELS["weapon"],
            report.weapon_summary,
            "平均UP抽数",
            report.weapon_summary.average_pulls_per_up,
        )
    with col3:
        _render_summary_tile(
            POOL_TAB_LABELS["standard"],
            report.standard_summary,
            "平均6星抽数",
            report.standard_summary.average_pulls_per_rare,
        )

    st.subheader("特许寻访共享保底")
    st.caption("各期特许寻访的6星保底互相继承，免费十连不计入")
    render_pity_metrics(report.shared_special_pity, st.session_state.rules)

    if report.special:
        table = pd.DataFrame(
            [
                {
                    "卡池": stats.banner_name,
                    "总抽数": stats.total,
                    "当前垫抽": stats.current_pity,
                    "6星": stats.rare_count,
                    "5星": stats.five_star_count,
                    "武库配额": stats.armory_quota,
                }
                for stats in report.special
            ]
        )
        st.dataframe(table, width="stretch", hide_index=True)
