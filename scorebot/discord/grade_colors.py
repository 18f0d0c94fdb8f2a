"""Grade palette and icon URLs for score embeds."""

from scorebot.shared.exceptions import UnknownGradeError
from scorebot.shared.models import GameMode

# Grade colors (hex values), matching the osu! website
GRADE_COLORS: dict[str, int] = {
    "X": 0xDE31AE,  # Pink (SS)
    "S": 0x02B5C3,  # Cyan
    "A": 0x88DA20,  # Green
    "B": 0xEBBD48,  # Yellow
    "C": 0xFF8E5D,  # Orange
    "D": 0xFF5A5A,  # Red
}

GRADE_ICON_URL = "https://raw.githubusercontent.com/Yumeo0/osu-icons/refs/heads/main/Grade-{grade}.png"
MODE_ICON_URL = "https://github.com/Yumeo0/osu-icons/blob/main/{mode}.png?raw=true"


def grade_color(grade: str) -> int:
    """Look up the embed color for a grade.

    Raises:
        UnknownGradeError: If grade is not one of X, S, A, B, C, D
    """
    try:
        return GRADE_COLORS[grade]
    except KeyError:
        raise UnknownGradeError(f"Unknown grade: {grade!r}") from None


def grade_icon_url(grade: str) -> str:
    """Look up the thumbnail icon for a grade.

    Raises:
        UnknownGradeError: If grade is not one of X, S, A, B, C, D
    """
    if grade not in GRADE_COLORS:
        raise UnknownGradeError(f"Unknown grade: {grade!r}")
    return GRADE_ICON_URL.format(grade=grade)


def mode_icon_url(mode: GameMode) -> str:
    """Footer icon for a ruleset."""
    return MODE_ICON_URL.format(mode=mode.value)
