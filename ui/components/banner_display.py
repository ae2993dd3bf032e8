"""Banner display grid component for pull-based banners."""

import pandas as pd
import streamlit as st

from summary import BannerStats, StatsReport
from ui.components.overview_section import render_pity_metrics
from ui.constants import POOL_TAB_LABELS, RARITY_COLORS


def _segments_frame(stats: BannerStats) -> pd.DataFrame:
    rows = []
    for segment in stats.segments:
        if segment.rare_record is None:
            result = "（未出6星）"
        elif segment.is_up:
            result = f"{segment.rare_record.item_name} (UP)"
        else:
            result = segment.rare_record.item_name
        rows.append(
            {
                "6星": result,
                "抽数": segment.pull_count,
                "5星": ", ".join(r.item_name for r in segment.five_star_records),
                "免费抽": segment.free_pull_count,
                "时间": segment.rare_record.pull_timestamp if segment.rare_record else "",
            }
        )
    return pd.DataFrame(rows)


def _render_free_pulls(stats: BannerStats):
    free = stats.free_pulls
    if not free.has_free_pulls:
        return
    text = f"免费十连 {free.free_pull_count} 抽"
    if free.free_rare_pull is not None:
        suffix = "(UP)" if free.was_free_rare_up else ""
        color = RARITY_COLORS[6]
        text += (
            f"，出了 <span style='color:{color}'><b>"
            f"{free.free_rare_pull.item_name}{suffix}</b></span>"
        )
    st.markdown(text, unsafe_allow_html=True)
    st.caption("免费十连不计入保底")


def _render_milestones(stats: BannerStats):
    milestones = stats.special_milestones
    if milestones is None:
        return
    col1, col2, col3 = st.columns(3)
    with col1:
        if milestones.has_up_rare:
            st.metric("UP保底", "已获得")
        else:
            st.metric("UP保底", f"还差 {milestones.pulls_to_up_guarantee} 抽")
    with col2:
        if milestones.has_info_book:
            st.metric("情报书", "已获得")
        else:
            st.metric("情报书", f"还差 {milestones.pulls_to_info_book} 抽")
    with col3:
        st.metric(
            "UP信物",
            f"{milestones.token_times} 个",
            help=f"下一个还差 {milestones.pulls_to_next_token} 抽",
        )


def _render_banner(stats: BannerStats, show_pity: bool):
    expanded = stats.banner_id in st.session_state.expanded_banners
    with st.expander(f"{stats.banner_name}（{stats.total} 抽）", expanded=expanded):
        if stats.config is not None and stats.config.up_item_name:
            st.caption(f"UP: {stats.config.up_item_name}")
        if show_pity:
            render_pity_metrics(stats.pity_status, st.session_state.rules)
        st.caption(
            f"6星 {stats.rare_count} / 5星 {stats.five_star_count} / "
            f"武库配额 {stats.armory_quota}"
        )
        _render_milestones(stats)
        _render_free_pulls(stats)
        if stats.segments:
            st.dataframe(_segments_frame(stats), width="stretch", hide_index=True)


def _render_grid(banners: tuple[BannerStats, ...], show_pity: bool):
    if not banners:
        st.info("暂无记录")
        return
    cols = st.columns(min(len(banners), 2))
    for idx, stats in enumerate(banners):
        with cols[idx % 2]:
            _render_banner(stats, show_pity)


def render_banner_display(report: StatsReport):
    """Render the banner display grid with expand/collapse controls."""
    st.header("寻访记录")
    all_banners = report.special + report.standard + report.beginner
    col1, col2, _ = st.columns([1, 1, 10])
    with col1:
        if st.button("展开全部"):
            st.session_state.expanded_banners = {s.banner_id for s in all_banners}
            st.rerun()
    with col2:
        if st.button("折叠全部"):
            st.session_state.expanded_banners = set()
            st.rerun()

    tab_special, tab_standard, tab_beginner = st.tabs(
        [
            POOL_TAB_LABELS["special"],
            POOL_TAB_LABELS["standard"],
            POOL_TAB_LABELS["beginner"],
        ]
    )
    # Special banners share one pity, shown in the overview instead
    with tab_special:
        _render_grid(report.special, show_pity=False)
    with tab_standard:
        _render_grid(report.standard, show_pity=True)
    with tab_beginner:
        _render_grid(report.beginner, show_pity=True)
