"""Small CSS/HTML helpers shared by the module renderers."""

import re
from typing import Optional, Union

_HTML_ESCAPES = {
    "&": "&amp;",
    "<": "&lt;",
    ">": "&gt;",
    '"': "&quot;",
    "'": "&#039;",
}

_HEX_RE = re.compile(r"^#?([0-9a-f]{2})([0-9a-f]{2})([0-9a-f]{2})$", re.IGNORECASE)


def escape_html(text: str) -> str:
    return "".join(_HTML_ESCAPES.get(ch, ch) for ch in str(text))


def resolve_url(url: str, base_url: Optional[str]) -> str:
    """Make a relative asset path absolute against ``base_url``."""
    if not url:
        return ""
    if url.startswith("http://") or url.startswith("https://") or url.startswith("data:"):
        return url
    if not base_url:
        return url
    return f"{base_url.rstrip('/')}/{url.lstrip('/')}"


def css_length(value: Union[str, int, float, None]) -> Optional[str]:
    if value is None or value == "":
        return None
    if isinstance(value, (int, float)):
        return f"{value}px"
    return str(value)


def hex_to_rgb(hex_color: str) -> str:
    """'#ff8800' -> '255, 136, 0'. Unparseable input maps to black."""
    match = _HEX_RE.match(hex_color.strip())
    if not match:
        return "0, 0, 0"
    return ", ".join(str(int(part, 16)) for part in match.groups())


def rgba(hex_color: str, alpha: float) -> str:
    return f"rgba({hex_to_rgb(hex_color)}, {alpha})"


def gradient_css(color: str, start: float, mid: float, end: float, height: float, direction: str) -> str:
    return (
        f"linear-gradient({direction or 'to top'}, "
        f"{rgba(color, start)} 0%, {rgba(color, mid)} {height}%, {rgba(color, end)} 100%)"
    )


def special_position_css(position: str, pad_x: str, pad_y: Optional[str] = None) -> str:
    """Absolute-position declarations for one of the named anchor positions."""
    pad_y = pad_y or pad_x
    if position == "top-left":
        return f"top: {pad_y}; left: {pad_x};"
    if position == "top-right":
        return f"top: {pad_y}; right: {pad_x};"
    if position == "top-center":
        return f"top: {pad_y}; left: 50%; transform: translateX(-50%);"
    if position == "bottom-left":
        return f"bottom: {pad_y}; left: {pad_x};"
    if position == "bottom-right":
        return f"bottom: {pad_y}; right: {pad_x};"
    if position == "bottom-center":
        return f"bottom: {pad_y}; left: 50%; transform: translateX(-50%);"
    if position == "center-left":
        return f"top: 50%; left: {pad_x}; transform: translateY(-50%);"
    if position == "center-right":
        return f"top: 50%; right: {pad_x}; transform: translateY(-50%);"
    if position == "center":
        return "top: 50%; left: 50%; transform: translate(-50%, -50%);"
    return ""


def position_css(position) -> str:
    """Declarations for a manual Position (top/left/right/bottom/width/height)."""
    rules = []
    for prop in ("top", "left", "right", "bottom", "width", "height"):
        value = css_length(getattr(position, prop, None))
        if value is not None:
            rules.append(f"{prop}: {value};")
    return " ".join(rules)


def declarations(**props: Optional[str]) -> str:
    """font_size='12px' -> 'font-size: 12px;'. None values are dropped."""
    return " ".join(
        f"{name.replace('_', '-')}: {value};" for name, value in props.items() if value not in (None, "")
    )


def deep_merge(base: dict, override: dict) -> dict:
    """Recursive merge of two plain dicts. ``override`` wins; neither input is mutated."""
    merged = dict(base)
    for key, value in (override or {}).items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged
