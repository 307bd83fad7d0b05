"""
Rich text conversion.

Turns plain text plus highlight chunks (or the inline ``[text|prop:value]``
syntax) into sanitized, inline-styled HTML that the text modules embed.
"""

import re
from typing import Iterable, List, Optional, Sequence, Tuple

from slidegen.modules.helpers import escape_html
from slidegen.modules.types import StyledChunk, TextStyle

_COLOR_RE = re.compile(r"^(#[0-9a-f]{3,8}|rgb\([^)]+\)|rgba\([^)]+\)|[a-z]+)$", re.IGNORECASE)
_SIZE_RE = re.compile(r"^\d+(\.\d+)?(px|em|rem|%|pt)?$", re.IGNORECASE)
_SPACING_RE = re.compile(r"^-?\d+(\.\d+)?(px|em|rem)?$", re.IGNORECASE)
_LINE_HEIGHT_RE = re.compile(r"^\d+(\.\d+)?(px|em|rem|%)?$", re.IGNORECASE)
_PADDING_RE = re.compile(r"^\d+(\.\d+)?(px|em|rem|%)?(\s+\d+(\.\d+)?(px|em|rem|%)?)*$", re.IGNORECASE)
_BARE_NUMBER_RE = re.compile(r"^-?\d+(\.\d+)?$")
_INLINE_RE = re.compile(r"\[([^\]|]+)\|([^\]]+)\]")

TEXT_ALIGNMENTS = ("left", "center", "right", "justify")


def sanitize_color(value: str) -> str:
    value = value.strip()
    return value if _COLOR_RE.match(value) else ""


def sanitize_font(value: str) -> str:
    cleaned = re.sub(r"[<>{}]", "", value).strip()
    if " " in cleaned and not cleaned.startswith(("'", '"')) and "," not in cleaned:
        return f"'{cleaned}'"
    return cleaned


def _with_px(value: str) -> str:
    return f"{value}px" if _BARE_NUMBER_RE.match(value) else value


def sanitize_size(value: str) -> str:
    value = value.strip()
    return _with_px(value) if _SIZE_RE.match(value) else ""


def sanitize_letter_spacing(value: str) -> str:
    value = value.strip()
    return _with_px(value) if _SPACING_RE.match(value) else ""


def sanitize_line_height(value: str) -> str:
    value = value.strip()
    return value if _LINE_HEIGHT_RE.match(value) else ""


def sanitize_padding(value: str) -> str:
    value = value.strip()
    if not _PADDING_RE.match(value):
        return ""
    return " ".join(_with_px(part) for part in value.split())


def _font_weight(value: str) -> str:
    return re.sub(r"[^a-z0-9]", "", value.lower())


def chunk_styles(chunk: StyledChunk, parent: Optional[TextStyle]) -> List[str]:
    """Inline declarations for one chunk. Chunk values win over parent values."""
    parent = parent or TextStyle()
    styles = []

    def pick(own, inherited, sanitizer, prop):
        if own:
            value = sanitizer(own)
        elif inherited:
            value = sanitizer(inherited)
        else:
            return
        if value:
            styles.append(f"{prop}:{value}")

    pick(chunk.color, parent.color, sanitize_color, "color")
    pick(chunk.font_family, parent.font_family, sanitize_font, "font-family")
    pick(chunk.font_size, parent.font_size, sanitize_size, "font-size")

    if chunk.font_weight:
        styles.append(f"font-weight:{_font_weight(chunk.font_weight)}")
    elif chunk.bold:
        styles.append("font-weight:bold")
    elif parent.font_weight:
        styles.append(f"font-weight:{_font_weight(parent.font_weight)}")

    if chunk.italic:
        styles.append("font-style:italic")
    elif parent.font_style:
        styles.append(f"font-style:{_font_weight(parent.font_style)}")

    if chunk.underline:
        styles.append("text-decoration:underline")

    pick(chunk.letter_spacing, parent.letter_spacing, sanitize_letter_spacing, "letter-spacing")
    pick(chunk.line_height, parent.line_height, sanitize_line_height, "line-height")
    pick(chunk.background_color, parent.background_color, sanitize_color, "background-color")

    if chunk.padding:
        padding = sanitize_padding(chunk.padding)
        if padding:
            styles.append(f"padding:{padding} !important")
    elif parent.padding:
        padding = sanitize_padding(parent.padding)
        if padding:
            styles.append(f"padding:{padding}")

    return styles


def wrapper_styles(parent: TextStyle) -> List[str]:
    styles = []
    if parent.font_family and sanitize_font(parent.font_family):
        styles.append(f"font-family:{sanitize_font(parent.font_family)}")
    if parent.color and sanitize_color(parent.color):
        styles.append(f"color:{sanitize_color(parent.color)}")
    if parent.font_size and sanitize_size(parent.font_size):
        styles.append(f"font-size:{sanitize_size(parent.font_size)}")
    if parent.font_weight:
        styles.append(f"font-weight:{_font_weight(parent.font_weight)}")
    if parent.font_style:
        styles.append(f"font-style:{_font_weight(parent.font_style)}")
    if parent.letter_spacing and sanitize_letter_spacing(parent.letter_spacing):
        styles.append(f"letter-spacing:{sanitize_letter_spacing(parent.letter_spacing)}")
    if parent.line_height and sanitize_line_height(parent.line_height):
        styles.append(f"line-height:{sanitize_line_height(parent.line_height)}")
    if parent.text_align and parent.text_align.strip() in TEXT_ALIGNMENTS:
        styles.append(f"text-align:{parent.text_align.strip()}")
        # text-align needs a block box
        styles.append("display:block")
    return styles


def _overlaps(start: int, end: int, ranges: Iterable[Tuple[int, int]]) -> bool:
    return any(start < r_end and end > r_start for r_start, r_end in ranges)


def apply_styled_chunks(
    text: str,
    chunks: Sequence[StyledChunk],
    parent: Optional[TextStyle] = None,
) -> str:
    """Wrap the first occurrence of every chunk's text in a styled span.

    Chunks whose text is absent, or which overlap an earlier chunk, are
    skipped. Everything outside a chunk is HTML-escaped.
    """
    if not text:
        return ""
    if not chunks:
        return escape_html(text)

    replacements = []
    for chunk in chunks:
        if not chunk.text:
            continue
        start = text.find(chunk.text)
        if start == -1:
            continue
        end = start + len(chunk.text)
        if _overlaps(start, end, [(r[0], r[1]) for r in replacements]):
            continue

        styles = chunk_styles(chunk, parent)
        if not styles and not chunk.line_break:
            continue
        if styles:
            html = f'<span style="{";".join(styles)}">{escape_html(chunk.text)}</span>'
        else:
            html = escape_html(chunk.text)
        if chunk.line_break:
            html += '<span style="display:block;width:100%;height:0.5em"></span>'
        replacements.append((start, end, html))

    if not replacements:
        return escape_html(text)

    replacements.sort(key=lambda r: r[0])
    parts = []
    cursor = 0
    for start, end, html in replacements:
        if start > cursor:
            parts.append(escape_html(text[cursor:start]))
        parts.append(html)
        cursor = end
    if cursor < len(text):
        parts.append(escape_html(text[cursor:]))
    result = "".join(parts)

    if parent is not None:
        styles = wrapper_styles(parent)
        if styles:
            result = f'<span style="{";".join(styles)}">{result}</span>'
    return result


_INLINE_PROPERTIES = {
    "cor": ("color", sanitize_color),
    "color": ("color", sanitize_color),
    "fonte": ("font-family", sanitize_font),
    "font": ("font-family", sanitize_font),
    "tamanho": ("font-size", sanitize_size),
    "size": ("font-size", sanitize_size),
    "espacamento": ("letter-spacing", sanitize_letter_spacing),
    "letter-spacing": ("letter-spacing", sanitize_letter_spacing),
    "cor-de-fundo": ("background-color", sanitize_color),
    "background-color": ("background-color", sanitize_color),
    "backgroundcolor": ("background-color", sanitize_color),
    "preenchimento": ("padding", sanitize_padding),
    "padding": ("padding", sanitize_padding),
}

_INLINE_FLAGS = {
    "negrito": "font-weight:bold",
    "bold": "font-weight:bold",
    "italico": "font-style:italic",
    "italic": "font-style:italic",
    "sublinhado": "text-decoration:underline",
    "underline": "text-decoration:underline",
}


def _inline_declaration(prop: str, value: str) -> Optional[str]:
    prop = prop.strip().lower()
    value = value.strip()
    if prop in _INLINE_FLAGS:
        return _INLINE_FLAGS[prop] if value.lower() == "true" else None
    if prop in _INLINE_PROPERTIES:
        css_prop, sanitizer = _INLINE_PROPERTIES[prop]
        cleaned = sanitizer(value)
        return f"{css_prop}:{cleaned}" if cleaned else None
    return None


def parse_inline_styles(text: str) -> str:
    """'[Hello|cor:#ff0000] world' -> '<span style="color:#ff0000">Hello</span> world'"""
    if not text:
        return ""
    parts = []
    cursor = 0
    for match in _INLINE_RE.finditer(text):
        if match.start() > cursor:
            parts.append(escape_html(text[cursor:match.start()]))
        styles = []
        for pair in match.group(2).split(";"):
            if ":" not in pair:
                continue
            prop, value = pair.split(":", 1)
            declaration = _inline_declaration(prop, value)
            if declaration:
                styles.append(declaration)
        content = escape_html(match.group(1))
        parts.append(f'<span style="{";".join(styles)}">{content}</span>' if styles else content)
        cursor = match.end()
    if cursor < len(text):
        parts.append(escape_html(text[cursor:]))
    return "".join(parts)


def process_text_field(
    text: str,
    chunks: Optional[Sequence[StyledChunk]] = None,
    parent: Optional[TextStyle] = None,
) -> str:
    """HTML for a text field: styled chunks when present, inline syntax otherwise."""
    if not text:
        return ""
    if chunks:
        return apply_styled_chunks(text, chunks, parent)
    html = parse_inline_styles(text)
    if parent is not None:
        styles = wrapper_styles(parent)
        if styles:
            return f'<span style="{";".join(styles)}">{html}</span>'
    return html
