"""Header component with title and import/share/reset buttons."""

import streamlit as st

from export import ExportFormatError
from ui.state import import_file, serialize_state


def render_header():
    """Render the header with title and action buttons."""
    st.title("终末地抽卡记录统计")

    uploaded = st.file_uploader(
        "导入抽卡记录",
        type=["json", "csv"],
        help="使用抽卡助手导出的 JSON 或 CSV 文件",
    )
    if uploaded is not None and uploaded.name != st.session_state.source_name:
        try:
            result = import_file(uploaded.name, uploaded.getvalue())
            st.success(f"已导入 {len(result.records)} 条记录")
        except ExportFormatError as e:
            st.error(f"导入失败: {e}")

    if st.session_state.import_errors:
        with st.expander(f"跳过了 {len(st.session_state.import_errors)} 行"):
            for error in st.session_state.import_errors:
                st.caption(error)

    col_buttons, _ = st.columns([1, 4])
    with col_buttons:
        c1, c2 = st.columns(2)
        with c1:
            with st.popover("分享设置"):
                st.code(serialize_state(), language=None)
                st.caption("复制上方字符串即可分享UP配置与保底参数（不含抽卡记录）")
        with c2:
            with st.popover("重置"):
                st.warning("确定要清空已导入的记录和设置吗？")
                if st.button("确认重置", type="primary"):
                    st.session_state.clear()
                    st.query_params.clear()
                    st.rerun()
