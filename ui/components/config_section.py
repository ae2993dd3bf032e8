"""Pity rule configuration section component."""

import streamlit as st

from banner import PityRules
from ui.defaults import create_default_rules
from ui.state import update_url

# (field, label, help) per input
_PULL_FIELDS = [
    ("soft_pity", "概率提升起点", "无6星抽数达到该值后6星概率开始提升"),
    ("hard_pity", "6星保底", "无6星抽数达到该值时必出6星"),
    ("up_guarantee", "UP保底", "单期特许寻访抽数达到该值时必出UP"),
    ("info_book_at", "情报书", "单期特许寻访抽数达到该值时获得寻访情报书"),
    ("token_every", "信物间隔", "单期特许寻访每累计该抽数获得一次UP信物"),
]
_SESSION_FIELDS = [
    ("session_size", "每次申领条数", "一次武库申领产出的武器数"),
    ("session_rare_hard_pity", "6星保底(申领)", "连续多少次申领内必出6星武器"),
    ("session_up_hard_pity", "UP保底(申领)", "累计多少次申领内必出UP武器"),
    ("box_reward_first", "首次补给箱", "第几次申领获得首个武库补给箱"),
    ("up_reward_first", "首次UP武器", "第几次申领获得首把UP武器奖励"),
    ("reward_period", "奖励周期", "累计奖励每隔多少次申领重复"),
]


def _on_rules_change():
    """Callback when any rule input changes."""
    values = st.session_state.rules.model_dump()
    for field, _, _ in _PULL_FIELDS + _SESSION_FIELDS:
        values[field] = st.session_state[f"rules_{field}"]
    st.session_state.rules = PityRules(**values)
    update_url()


def _render_inputs(fields: list[tuple[str, str, str]]):
    cols = st.columns(len(fields))
    for col, (field, label, help_text) in zip(cols, fields):
        with col:
            st.number_input(
                label,
                min_value=1,
                value=getattr(st.session_state.rules, field),
                step=1,
                key=f"rules_{field}",
                on_change=_on_rules_change,
                help=help_text,
            )


def render_config_section():
    """Render the pity rule configuration section."""
    with st.expander("保底参数", expanded=False):
        st.subheader("寻访（按抽数）")
        with st.container(border=True):
            _render_inputs(_PULL_FIELDS)
        st.subheader("武库（按申领次数）")
        with st.container(border=True):
            _render_inputs(_SESSION_FIELDS)
        if st.button("恢复默认"):
            st.session_state.rules = create_default_rules()
            for field, _, _ in _PULL_FIELDS + _SESSION_FIELDS:
                st.session_state.pop(f"rules_{field}", None)
            update_url()
            st.rerun()
