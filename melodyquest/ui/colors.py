"""Theme colors and color utilities for the UI."""


class QuestColors:
    """Warm stage palette."""

    BG_TOP = "#fff3e0"
    BG_MIDDLE = "#ffe0b2"
    BG_BOTTOM = "#ffcc80"

    PRIMARY = "#6a1b9a"
    PRIMARY_LIGHT = "#9c4dcc"
    PRIMARY_DARK = "#38006b"

    CORRECT = "#90be6d"
    INCORRECT = "#f94144"

    CARD_BG = "rgba(255, 255, 255, 0.85)"
    CARD_BORDER = "rgba(255, 255, 255, 0.6)"

    TEXT_PRIMARY = "#2d1b36"
    TEXT_SECONDARY = "#5e4b66"
    TEXT_MUTED = "#8d7b94"

    # Confetti and wheel slices
    CONFETTI = ("#f94144", "#f3722c", "#f8961e", "#f9c74f", "#90be6d", "#577590")


def blend_hex(a: str, b: str, t: float) -> str:
    """Blend two #RRGGBB colors. t=0 -> a, t=1 -> b."""
    try:
        a = a.strip()
        b = b.strip()
        if not (a.startswith("#") and b.startswith("#") and len(a) == 7 and len(b) == 7):
            return a
        t = max(0.0, min(1.0, float(t)))
        ar, ag, ab = int(a[1:3], 16), int(a[3:5], 16), int(a[5:7], 16)
        br, bg, bb = int(b[1:3], 16), int(b[3:5], 16), int(b[5:7], 16)
        r = int(ar + (br - ar) * t)
        g = int(ag + (bg - ag) * t)
        bl = int(ab + (bb - ab) * t)
        return f"#{r:02X}{g:02X}{bl:02X}"
    except (TypeError, ValueError):
        return a


def slice_color(index: int) -> str:
    """Fill color for wheel slice ``index``: alternating lightened palette entries."""
    base = QuestColors.CONFETTI[index % len(QuestColors.CONFETTI)]
    return blend_hex(base, "#FFFFFF", 0.15 if index % 2 else 0.35)
