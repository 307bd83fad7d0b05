"""
Card module: the container that wraps all content-category modules.

The wrapper element itself is emitted by the composer, so this module only
contributes CSS.
"""

from typing import Literal

from pydantic import Field

from slidegen.modules.helpers import gradient_css, resolve_url
from slidegen.modules.types import CamelModel, GradientOverlay, ModuleDefinition, RenderContext, SpecialPosition


class CardPadding(CamelModel):
    top: float = 80
    right: float = 80
    bottom: float = 80
    left: float = 80


class CardShadow(CamelModel):
    enabled: bool = False
    x: float = 0
    y: float = 10
    blur: float = 30
    spread: float = 0
    color: str = "rgba(0, 0, 0, 0.3)"


class CardData(CamelModel):
    enabled: bool = True
    width: float = Field(default=90, ge=0, le=100)
    height: float = Field(default=90, ge=0, le=100)
    special_position: SpecialPosition = "center"
    position_padding: float = Field(default=40, ge=0)
    border_radius: float = Field(default=0, ge=0)
    background_type: Literal["color", "image"] = "color"
    background_color: str = "#FFFFFF"
    background_image: str = ""
    padding: CardPadding = Field(default_factory=CardPadding)
    gradient_overlay: GradientOverlay = Field(default_factory=GradientOverlay)
    shadow: CardShadow = Field(default_factory=CardShadow)
    layout_direction: Literal["column", "row"] = "column"
    content_gap: str = "12px"
    content_align: Literal["flex-start", "center", "flex-end", "stretch"] = "stretch"
    custom_styles: str = ""


def _position(position: str, padding: float) -> str:
    pad = f"{padding}px"
    rules = {
        "center": "position: absolute; top: 50%; left: 50%; transform: translate(-50%, -50%);",
        "top-left": f"position: absolute; top: {pad}; left: {pad};",
        "top-center": f"position: absolute; top: {pad}; left: 50%; transform: translateX(-50%);",
        "top-right": f"position: absolute; top: {pad}; right: {pad};",
        "center-left": f"position: absolute; top: 50%; left: {pad}; transform: translateY(-50%);",
        "center-right": f"position: absolute; top: 50%; right: {pad}; transform: translateY(-50%);",
        "bottom-left": f"position: absolute; bottom: {pad}; left: {pad};",
        "bottom-center": f"position: absolute; bottom: {pad}; left: 50%; transform: translateX(-50%);",
        "bottom-right": f"position: absolute; bottom: {pad}; right: {pad};",
    }
    return rules.get(position, "position: relative;")


def card_css(data: CardData, context: RenderContext) -> str:
    if not data.enabled:
        return ""

    overlay = data.gradient_overlay
    gradient = "none"
    if overlay.enabled:
        gradient = gradient_css(
            overlay.color,
            overlay.start_opacity,
            overlay.mid_opacity,
            overlay.end_opacity,
            overlay.height,
            overlay.direction,
        )

    shadow = "none"
    if data.shadow.enabled:
        s = data.shadow
        shadow = f"{s.x}px {s.y}px {s.blur}px {s.spread}px {s.color}"

    if data.background_type == "image" and data.background_image:
        background = f"url({resolve_url(data.background_image, context.base_url)})"
        background_color = "transparent"
    else:
        background = "none"
        background_color = data.background_color if data.background_type == "color" else "transparent"

    align = data.content_align if data.layout_direction == "row" else "stretch"
    pad = data.padding

    return f"""
    .card-container {{
      width: {data.width}%;
      height: {data.height}%;
      background-color: {background_color};
      background-image: {background};
      background-size: cover;
      background-position: center;
      background-repeat: no-repeat;
      border-radius: {data.border_radius}px;
      {_position(data.special_position, data.position_padding)}
      z-index: 1;
      display: flex;
      flex-direction: {data.layout_direction};
      gap: {data.content_gap};
      align-items: {align};
      padding: {pad.top}px {pad.right}px {pad.bottom}px {pad.left}px;
      box-sizing: border-box;
      overflow: hidden;
      box-shadow: {shadow};
      {data.custom_styles}
    }}

    .card-container::before {{
      content: '';
      position: absolute;
      top: 0; left: 0; right: 0; bottom: 0;
      background-image: {gradient};
      pointer-events: none;
      z-index: 0;
      display: {'block' if overlay.enabled else 'none'};
      border-radius: {data.border_radius}px;
    }}
    """.strip()


def card_html(data: CardData, context: RenderContext) -> str:
    return ""


DEFINITION = ModuleDefinition(
    id="card",
    name="Card Container",
    description="Centered container with background, padding, gradient and shadow",
    category="layout",
    stack_order=1,
    schema=CardData,
    css=card_css,
    html=card_html,
)
