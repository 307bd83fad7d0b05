"""Corners module: four corner slots, each empty, a text badge or an SVG."""

from typing import List, Literal

from pydantic import Field

from slidegen.modules.helpers import escape_html, resolve_url, special_position_css
from slidegen.modules.types import CamelModel, ModuleDefinition, RenderContext, TextStyle

CORNER_POSITIONS = ("top-left", "top-right", "bottom-left", "bottom-right")


def _default_text_style() -> TextStyle:
    return TextStyle(font_family="Arial", font_size="18px", font_weight="700", color="#FFFFFF")


class Corner(CamelModel):
    type: Literal["none", "text", "svg"] = "none"
    text: str = ""
    text_style: TextStyle = Field(default_factory=_default_text_style)
    background_enabled: bool = False
    svg_content: str = ""
    svg_url: str = ""
    svg_color: str = "#ffffff"
    svg_width: str = "60px"
    svg_height: str = "60px"
    special_position: Literal["none", "top-left", "top-right", "bottom-left", "bottom-right"] = "none"
    padding_x: float = Field(default=40, ge=0, le=300)
    padding_y: float = Field(default=40, ge=0, le=300)


class CornersData(CamelModel):
    corners: List[Corner] = Field(
        default_factory=lambda: [Corner() for _ in range(4)],
        min_length=4,
        max_length=4,
    )


def _corner_position(corner: Corner, index: int) -> str:
    anchor = corner.special_position if corner.special_position != "none" else CORNER_POSITIONS[index]
    return special_position_css(anchor, f"{corner.padding_x:g}px", f"{corner.padding_y:g}px")


def corners_css(data: CornersData, context: RenderContext) -> str:
    rules = []
    for index, corner in enumerate(data.corners):
        if corner.type == "none":
            continue
        number = index + 1
        rules.append(
            f"""
    .corner-{number} {{
      position: absolute;
      {_corner_position(corner, index)}
      z-index: 99;
      display: flex;
      align-items: center;
    }}"""
        )
        if corner.type == "text":
            style = corner.text_style
            background = "rgba(0, 0, 0, 0.6)" if corner.background_enabled else "transparent"
            rules.append(
                f"""
    .corner-{number}-text {{
      font-family: {style.font_family or 'Arial'};
      font-size: {style.font_size or '18px'};
      font-weight: {style.font_weight or '700'};
      color: {style.color or '#FFFFFF'};
      background-color: {background};
      padding: {'8px 16px' if corner.background_enabled else '0'};
      border-radius: 4px;
    }}"""
            )
        else:
            rules.append(
                f"""
    .corner-{number} svg, .corner-{number} img {{
      width: {corner.svg_width};
      height: {corner.svg_height};
      color: {corner.svg_color};
      fill: currentColor;
    }}"""
            )
    return "".join(rules).strip()


def _corner_content(corner: Corner, number: int, context: RenderContext) -> str:
    if corner.type == "text":
        return f'<span class="corner-{number}-text">{escape_html(corner.text)}</span>'
    if corner.type == "svg":
        if corner.svg_content.strip():
            return corner.svg_content
        if corner.svg_url.strip() and corner.svg_url != "none":
            return f'<img src="{escape_html(resolve_url(corner.svg_url, context.base_url))}" alt="Corner SVG" />'
    return ""


def corners_html(data: CornersData, context: RenderContext) -> str:
    parts = []
    for index, corner in enumerate(data.corners):
        content = _corner_content(corner, index + 1, context)
        if content:
            parts.append(f'<div class="corner corner-{index + 1}">{content}</div>')
    return "\n  ".join(parts)


DEFINITION = ModuleDefinition(
    id="corners",
    name="Corner Elements",
    description="Text or SVG badges in the four corners",
    category="overlay",
    stack_order=99,
    schema=CornersData,
    css=corners_css,
    html=corners_html,
)
