"""Bullets module: 3 to 5 cards, each with an icon (url, emoji or number) and text."""

from typing import List, Literal

from pydantic import Field

from slidegen.modules.helpers import escape_html, resolve_url
from slidegen.modules.types import CamelModel, ModuleDefinition, RenderContext, StyledChunk, TextStyle
from slidegen.rich_text import process_text_field


def _default_text_style() -> TextStyle:
    return TextStyle(font_family="Arial", font_size="28px", font_weight="500", color="#000000")


class BulletItem(CamelModel):
    enabled: bool = True
    icon: str = ""
    icon_type: Literal["url", "emoji", "number"] = "emoji"
    text: str = ""
    styled_chunks: List[StyledChunk] = Field(default_factory=list)
    background_color: str = "#FFFFFF"
    text_style: TextStyle = Field(default_factory=_default_text_style)


class BulletsData(CamelModel):
    items: List[BulletItem] = Field(
        default_factory=lambda: [BulletItem(icon_type="number") for _ in range(3)],
        min_length=3,
        max_length=5,
    )
    layout: Literal["vertical", "horizontal", "grid"] = "vertical"
    gap: int = Field(default=15, ge=0, le=100)
    item_padding: str = "16px 20px"
    border_radius: int = Field(default=8, ge=0, le=50)
    icon_size: int = Field(default=48, ge=20, le=100)
    icon_background_color: str = "#000000"
    icon_color: str = "#FFFFFF"
    icon_gap: int = Field(default=16, ge=0, le=50)
    card_shadow: str = "0 2px 8px rgba(0, 0, 0, 0.1)"
    card_min_height: int = Field(default=0, ge=0, le=200)


_DIRECTION = {
    "vertical": "display: flex; flex-direction: column;",
    "horizontal": "display: flex; flex-direction: row;",
    "grid": "display: grid; grid-template-columns: repeat(2, 1fr);",
}


def bullets_css(data: BulletsData, context: RenderContext) -> str:
    item_rules = []
    for index, item in enumerate(data.items):
        style = item.text_style
        item_rules.append(
            f"""
    .bullet-card-{index + 1} {{ background-color: {item.background_color}; }}
    .bullet-text-{index + 1} {{
      font-family: {style.font_family or 'Arial'};
      font-size: {style.font_size or '28px'};
      font-weight: {style.font_weight or '500'};
      color: {style.color or '#000000'};
      line-height: {style.line_height or '1.3'};
    }}""".rstrip()
        )

    return f"""
    .bullets-section {{
      {_DIRECTION[data.layout]}
      gap: {data.gap}px;
      width: 100%;
      position: relative;
      z-index: 10;
    }}

    .bullet-card {{
      display: flex;
      align-items: center;
      gap: {data.icon_gap}px;
      padding: {data.item_padding};
      border-radius: {data.border_radius}px;
      box-shadow: {data.card_shadow};
      min-height: {data.card_min_height}px;
      box-sizing: border-box;
    }}

    .bullet-icon {{
      flex-shrink: 0;
      width: {data.icon_size}px;
      height: {data.icon_size}px;
      border-radius: 50%;
      background-color: {data.icon_background_color};
      color: {data.icon_color};
      display: flex;
      align-items: center;
      justify-content: center;
      font-size: {data.icon_size // 2}px;
      font-weight: 700;
    }}

    .bullet-icon img {{
      width: 60%;
      height: 60%;
      object-fit: contain;
    }}
{''.join(item_rules)}
    """.strip()


def _icon_html(item: BulletItem, index: int, context: RenderContext) -> str:
    if item.icon_type == "number":
        return str(index + 1)
    if not item.icon:
        return ""
    if item.icon_type == "url":
        return f'<img src="{escape_html(resolve_url(item.icon, context.base_url))}" alt="Icon" />'
    return escape_html(item.icon)


def bullets_html(data: BulletsData, context: RenderContext) -> str:
    cards = []
    for index, item in enumerate(data.items):
        if not item.enabled or not item.text:
            continue
        icon = _icon_html(item, index, context)
        text = process_text_field(item.text, item.styled_chunks, item.text_style if item.styled_chunks else None)
        icon_block = f'<div class="bullet-icon">{icon}</div>' if icon else ""
        cards.append(
            f'<div class="bullet-card bullet-card-{index + 1}">'
            f'{icon_block}<div class="bullet-text bullet-text-{index + 1}">{text}</div></div>'
        )
    if not cards:
        return ""
    return '<div class="bullets-section">\n    ' + "\n    ".join(cards) + "\n  </div>"


DEFINITION = ModuleDefinition(
    id="bullets",
    name="Bullet Cards",
    description="Cards with an icon and a line of text",
    category="content",
    stack_order=10,
    schema=BulletsData,
    css=bullets_css,
    html=bullets_html,
)
