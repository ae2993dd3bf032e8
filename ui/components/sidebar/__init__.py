"""Sidebar component modules."""

from ui.components.sidebar.banner_management import render_banner_management

__all__ = [
    "render_banner_management",
]
