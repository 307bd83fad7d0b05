"""
SVG elements module: up to three decorative SVG images placed anywhere on the
canvas, either at a named anchor or at manual coordinates.

SVGs loaded through ``<img>`` cannot be recoloured with ``fill``, so the
colour override is approximated with a CSS filter chain.
"""

import colorsys
import re
from typing import Dict, List, Optional

from pydantic import Field

from slidegen.modules.helpers import css_length, escape_html, resolve_url
from slidegen.modules.types import CamelModel, ModuleDefinition, Position, RenderContext, SpecialPosition

_HEX6_RE = re.compile(r"^[0-9a-f]{6}$")

_PRESET_FILTERS = {
    "white": "brightness(0) saturate(100%) invert(100%)",
    "#ffffff": "brightness(0) saturate(100%) invert(100%)",
    "#fff": "brightness(0) saturate(100%) invert(100%)",
    "black": "brightness(0) saturate(100%)",
    "#000000": "brightness(0) saturate(100%)",
    "#000": "brightness(0) saturate(100%)",
}


class SvgElement(CamelModel):
    enabled: bool = False
    svg_url: str = ""
    color: str = "#ffffff"
    width: str = "100px"
    height: str = "100px"
    position: Position = Field(default_factory=lambda: Position(top="50px", left="50px"))
    special_position: SpecialPosition = "none"
    special_padding: float = Field(default=5, ge=0, le=20)
    rotation: float = Field(default=0, ge=0, le=360)
    opacity: float = Field(default=1, ge=0, le=1)
    z_index_override: Optional[int] = None

    @property
    def visible(self) -> bool:
        return self.enabled and bool(self.svg_url.strip())


def _default_elements() -> List[SvgElement]:
    return [
        SvgElement(position=Position(top=f"{offset}px", left=f"{offset}px"))
        for offset in (50, 100, 150)
    ]


class SvgElementsData(CamelModel):
    svg_elements: List[SvgElement] = Field(default_factory=_default_elements, max_length=3)


def color_filter(color: str) -> str:
    """CSS filter that tints a black-rendered SVG towards ``color``."""
    if not color or color == "none":
        return "none"
    normalized = color.strip().lower()
    if normalized in _PRESET_FILTERS:
        return _PRESET_FILTERS[normalized]

    hex_value = normalized.lstrip("#")
    if len(hex_value) == 3:
        hex_value = "".join(ch * 2 for ch in hex_value)
    if not _HEX6_RE.match(hex_value):
        return "none"

    r, g, b = (int(hex_value[i : i + 2], 16) / 255 for i in (0, 2, 4))
    h, l, s = colorsys.rgb_to_hls(r, g, b)
    hue, lightness, saturation = h * 360, l * 100, s * 100
    invert = 100 if lightness > 50 else 0
    sepia = 100 if saturation > 0 else 0
    saturate = round(saturation * 20) if saturation > 0 else 100
    return (
        f"brightness(0) saturate(100%) invert({invert}%) sepia({sepia}%) "
        f"saturate({saturate}%) hue-rotate({round(hue)}deg) brightness({round(lightness * 2)}%) contrast(100%)"
    )


def _placement(svg: SvgElement, context: RenderContext) -> str:
    rotate = f"rotate({svg.rotation:g}deg)"
    if svg.special_position != "none":
        pad_x = f"{context.viewport_width * svg.special_padding / 100:g}px"
        pad_y = f"{context.viewport_height * svg.special_padding / 100:g}px"
        anchors = {
            "top-left": f"top: {pad_y}; left: {pad_x};",
            "top-right": f"top: {pad_y}; right: {pad_x};",
            "bottom-left": f"bottom: {pad_y}; left: {pad_x};",
            "bottom-right": f"bottom: {pad_y}; right: {pad_x};",
            "top-center": f"top: {pad_y}; left: 50%; transform: translateX(-50%) {rotate};",
            "bottom-center": f"bottom: {pad_y}; left: 50%; transform: translateX(-50%) {rotate};",
            "center-left": f"top: 50%; left: {pad_x}; transform: translateY(-50%) {rotate};",
            "center-right": f"top: 50%; right: {pad_x}; transform: translateY(-50%) {rotate};",
            "center": f"top: 50%; left: 50%; transform: translate(-50%, -50%) {rotate};",
        }
        return anchors[svg.special_position]

    rules = [
        f"{prop}: {css_length(getattr(svg.position, prop))};"
        for prop in ("top", "left", "right", "bottom", "width", "height")
        if getattr(svg.position, prop) is not None
    ]
    if svg.rotation:
        rules.append(f"transform: {rotate};")
    return " ".join(rules)


def svg_elements_css(data: SvgElementsData, context: RenderContext) -> str:
    rules = [
        f"""
    .svg-elements-layer {{
      position: absolute;
      top: 0;
      left: 0;
      width: {context.viewport_width}px;
      height: {context.viewport_height}px;
      pointer-events: none;
      z-index: 20;
    }}

    .svg-element {{
      position: absolute;
      display: flex;
      align-items: center;
      justify-content: center;
    }}

    .svg-element img {{
      width: 100%;
      height: 100%;
      object-fit: contain;
    }}"""
    ]
    for index, svg in enumerate(data.svg_elements):
        if not svg.visible:
            continue
        number = index + 1
        z_index = f"\n      z-index: {svg.z_index_override};" if svg.z_index_override is not None else ""
        rules.append(
            f"""
    .svg-element-{number} {{
      {_placement(svg, context)}
      width: {svg.width};
      height: {svg.height};
      opacity: {svg.opacity:g};{z_index}
    }}

    .svg-element-{number} img {{
      filter: {color_filter(svg.color)};
    }}"""
        )
    return "".join(rules).strip()


def svg_elements_html(data: SvgElementsData, context: RenderContext) -> str:
    elements = [
        f'<div class="svg-element svg-element-{index + 1}">'
        f'<img src="{escape_html(resolve_url(svg.svg_url, context.base_url))}" alt="SVG {index + 1}" /></div>'
        for index, svg in enumerate(data.svg_elements)
        if svg.visible
    ]
    if not elements:
        return ""
    return '<div class="svg-elements-layer">\n    ' + "\n    ".join(elements) + "\n  </div>"


def svg_elements_style_variables(data: SvgElementsData) -> Dict[str, str]:
    variables = {}
    for index, svg in enumerate(data.svg_elements):
        if not svg.visible:
            continue
        prefix = f"svg{index + 1}"
        variables[f"{prefix}-width"] = svg.width
        variables[f"{prefix}-height"] = svg.height
        variables[f"{prefix}-color"] = svg.color
        variables[f"{prefix}-opacity"] = f"{svg.opacity:g}"
        if svg.rotation:
            variables[f"{prefix}-rotation"] = f"{svg.rotation:g}deg"
    return variables


DEFINITION = ModuleDefinition(
    id="svgElements",
    name="SVG Elements",
    description="Positioned SVG icons and decorations",
    category="overlay",
    stack_order=20,
    schema=SvgElementsData,
    css=svg_elements_css,
    html=svg_elements_html,
    style_variables=svg_elements_style_variables,
)
