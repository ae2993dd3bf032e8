"""UI component modules."""

from ui.components.banner_display import render_banner_display
from ui.components.config_section import render_config_section
from ui.components.header import render_header
from ui.components.overview_section import render_overview_section
from ui.components.weapon_section import render_weapon_section

__all__ = [
    "render_header",
    "render_config_section",
    "render_overview_section",
    "render_banner_display",
    "render_weapon_section",
]
