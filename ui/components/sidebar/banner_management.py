"""Sidebar component for setting the up item of each imported banner."""

import streamlit as st

from banner import PoolKind, pool_kind
from summary import group_by_banner
from ui.state import update_url


def _on_up_item_change(banner_id: str):
    """Callback when an up item input changes."""
    value = st.session_state[f"up_item_{banner_id}"].strip()
    if value:
        st.session_state.up_items[banner_id] = value
    else:
        st.session_state.up_items.pop(banner_id, None)
    update_url()


def render_banner_management():
    """Render the up item inputs for every special and weapon banner in the records."""
    st.header("UP配置")
    groups = group_by_banner(st.session_state.records)
    banners = [
        (banner_id, records[0].banner_name or banner_id)
        for banner_id, records in groups.items()
        if pool_kind(banner_id) in (PoolKind.SPECIAL, PoolKind.WEAPON)
    ]
    if not banners:
        st.info("导入记录后可在此设置各卡池的UP")
        return

    st.caption("未设置UP的卡池，6星一律按歪统计")
    for banner_id, banner_name in banners:
        st.text_input(
            banner_name,
            value=st.session_state.up_items.get(banner_id, ""),
            key=f"up_item_{banner_id}",
            on_change=_on_up_item_change,
            args=(banner_id,),
            help=banner_id,
        )
