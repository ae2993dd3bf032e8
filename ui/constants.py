"""Display constants shared by the UI components."""

RARITY_COLORS = {
    6: "#ff7b00",
    5: "#ffcc00",
    4: "#b07cff",
    3: "#4da6ff",
}

POOL_TAB_LABELS = {
    "special": "特许寻访",
    "weapon": "武库申领",
    "standard": "常驻寻访",
    "beginner": "新手寻访",
}

REWARD_LABELS = {
    "box": "武库补给箱",
    "up": "UP武器",
    "none": "",
}
