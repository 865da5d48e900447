"""Color validation and small color helpers for the status display.

Colors come from settings as ``#RGB`` / ``#RRGGBB`` hex strings or CSS
color names.
"""

from __future__ import annotations

import re

_HEX_RE = re.compile(r"^#([A-Fa-f0-9]{6}|[A-Fa-f0-9]{3})$")

CSS_COLOR_NAMES = frozenset({
    "aliceblue", "antiquewhite", "aqua", "aquamarine", "azure", "beige",
    "bisque", "black", "blanchedalmond", "blue", "blueviolet", "brown",
    "burlywood", "cadetblue", "chartreuse", "chocolate", "coral",
    "cornflowerblue", "cornsilk", "crimson", "cyan", "darkblue", "darkcyan",
    "darkgoldenrod", "darkgray", "darkgreen", "darkgrey", "darkkhaki",
    "darkmagenta", "darkolivegreen", "darkorange", "darkorchid", "darkred",
    "darksalmon", "darkseagreen", "darkslateblue", "darkslategray",
    "darkslategrey", "darkturquoise", "darkviolet", "deeppink",
    "deepskyblue", "dimgray", "dimgrey", "dodgerblue", "firebrick",
    "floralwhite", "forestgreen", "fuchsia", "gainsboro", "ghostwhite",
    "gold", "goldenrod", "gray", "green", "greenyellow", "grey", "honeydew",
    "hotpink", "indianred", "indigo", "ivory", "khaki", "lavender",
    "lavenderblush", "lawngreen", "lemonchiffon", "lightblue", "lightcoral",
    "lightcyan", "lightgoldenrodyellow", "lightgray", "lightgreen",
    "lightgrey", "lightpink", "lightsalmon", "lightseagreen", "lightskyblue",
    "lightslategray", "lightslategrey", "lightsteelblue", "lightyellow",
    "lime", "limegreen", "linen", "magenta", "maroon", "mediumaquamarine",
    "mediumblue", "mediumorchid", "mediumpurple", "mediumseagreen",
    "mediumslateblue", "mediumspringgreen", "mediumturquoise",
    "mediumvioletred", "midnightblue", "mintcream", "mistyrose", "moccasin",
    "navajowhite", "navy", "oldlace", "olive", "olivedrab", "orange",
    "orangered", "orchid", "palegoldenrod", "palegreen", "paleturquoise",
    "palevioletred", "papayawhip", "peachpuff", "peru", "pink", "plum",
    "powderblue", "purple", "red", "rosybrown", "royalblue", "saddlebrown",
    "salmon", "sandybrown", "seagreen", "seashell", "sienna", "silver",
    "skyblue", "slateblue", "slategray", "slategrey", "snow", "springgreen",
    "steelblue", "tan", "teal", "thistle", "tomato", "turquoise", "violet",
    "wheat", "white", "whitesmoke", "yellow", "yellowgreen",
})

# Names we can turn into RGB.  Others validate but have no conversion.
_NAMED_HEX: dict[str, str] = {
    "red": "#FF0000",
    "green": "#008000",
    "blue": "#0000FF",
    "yellow": "#FFFF00",
    "orange": "#FFA500",
    "purple": "#800080",
    "pink": "#FFC0CB",
    "brown": "#A52A2A",
    "black": "#000000",
    "white": "#FFFFFF",
    "gray": "#808080",
    "grey": "#808080",
    "cyan": "#00FFFF",
    "magenta": "#FF00FF",
    "lime": "#00FF00",
    "maroon": "#800000",
    "navy": "#000080",
    "olive": "#808000",
    "silver": "#C0C0C0",
    "teal": "#008080",
}


def is_hex_color(value: str) -> bool:
    return bool(_HEX_RE.match(value))


def is_css_color_name(value: str) -> bool:
    return value.lower() in CSS_COLOR_NAMES


def is_valid_color(value: object) -> bool:
    """True for a hex color or a CSS color name (surrounding spaces ignored)."""
    if not isinstance(value, str):
        return False
    value = value.strip()
    return is_hex_color(value) or is_css_color_name(value)


def color_to_rgb(color: str) -> tuple[int, int, int] | None:
    """``(r, g, b)`` for *color*, or ``None`` when it can't be converted."""
    color = color.strip()
    if not is_hex_color(color):
        color = _NAMED_HEX.get(color.lower(), "")
        if not color:
            return None
    digits = color[1:]
    if len(digits) == 3:
        digits = "".join(ch * 2 for ch in digits)
    return (int(digits[0:2], 16), int(digits[2:4], 16), int(digits[4:6], 16))


def _to_hex(r: int, g: int, b: int) -> str:
    return f"#{r:02x}{g:02x}{b:02x}"


def lighten_color(color: str, amount: float = 0.2) -> str:
    """Blend *color* towards white.  Unknown colors come back unchanged."""
    rgb = color_to_rgb(color)
    if rgb is None:
        return color
    return _to_hex(*(min(255, int(c + (255 - c) * amount)) for c in rgb))


def darken_color(color: str, amount: float = 0.2) -> str:
    """Blend *color* towards black.  Unknown colors come back unchanged."""
    rgb = color_to_rgb(color)
    if rgb is None:
        return color
    return _to_hex(*(max(0, int(c * (1 - amount))) for c in rgb))

