import logging

import streamlit as st

from ui import initialize_session_state
from ui.components import (
    render_banner_display,
    render_config_section,
    render_header,
    render_overview_section,
    render_weapon_section,
)
from ui.components.sidebar import render_banner_management
from ui.state import current_report

st.set_page_config(page_title="终末地抽卡记录统计", layout="wide")

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

initialize_session_state()

with st.sidebar:
    render_banner_management()

render_header()
render_config_section()

if not st.session_state.records:
    st.info("请先导入抽卡记录")
    st.stop()

report = current_report()

render_overview_section(report)
st.divider()
render_banner_display(report)
st.divider()
render_weapon_section(report)
