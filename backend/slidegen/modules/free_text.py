"""Free text module: up to five absolutely positioned text labels over the canvas."""

from typing import List

from pydantic import Field

from slidegen.modules.helpers import escape_html, position_css, special_position_css
from slidegen.modules.types import CamelModel, ModuleDefinition, Position, RenderContext, SpecialPosition, TextStyle


def _default_style() -> TextStyle:
    return TextStyle(font_family="Arial", font_size="24px", font_weight="700", color="#FFFFFF")


class FreeTextElement(CamelModel):
    content: str = ""
    style: TextStyle = Field(default_factory=_default_style)
    position: Position = Field(default_factory=lambda: Position(top="40px", left="40px"))
    special_position: SpecialPosition = "none"
    special_padding: float = Field(default=8, ge=0, le=20)
    background_color: str = "transparent"
    background_padding: str = "10px 20px"
    border_radius: str = "6px"


class FreeTextData(CamelModel):
    count: int = Field(default=3, ge=1, le=5)
    texts: List[FreeTextElement] = Field(default_factory=lambda: [FreeTextElement() for _ in range(3)])


def free_text_css(data: FreeTextData, context: RenderContext) -> str:
    rules = [
        """
    .free-text-layer {
      position: absolute;
      top: 0; left: 0; right: 0; bottom: 0;
      pointer-events: none;
      z-index: 30;
    }
    .free-text {
      position: absolute;
      white-space: nowrap;
    }"""
    ]
    for index, text in enumerate(data.texts[: data.count]):
        if not text.content.strip():
            continue
        style = text.style
        if text.special_position != "none":
            pad_x = f"{context.viewport_width * text.special_padding / 100:g}px"
            pad_y = f"{context.viewport_height * text.special_padding / 100:g}px"
            placement = special_position_css(text.special_position, pad_x, pad_y)
        else:
            placement = position_css(text.position)
        rules.append(
            f"""
    .free-text-{index + 1} {{
      {placement}
      font-family: {style.font_family or 'Arial'};
      font-size: {style.font_size or '24px'};
      font-weight: {style.font_weight or '700'};
      color: {style.color or '#FFFFFF'};
      letter-spacing: {style.letter_spacing or '0'};
      text-transform: {style.text_transform or 'none'};
      background-color: {text.background_color};
      padding: {text.background_padding if text.background_color != 'transparent' else '0'};
      border-radius: {text.border_radius};
    }}"""
        )
    return "".join(rules).strip()


def free_text_html(data: FreeTextData, context: RenderContext) -> str:
    elements = [
        f'<div class="free-text free-text-{index + 1}">{escape_html(text.content)}</div>'
        for index, text in enumerate(data.texts[: data.count])
        if text.content.strip()
    ]
    return '<div class="free-text-layer">\n    ' + "\n    ".join(elements) + "\n  </div>"


DEFINITION = ModuleDefinition(
    id="freeText",
    name="Free Text",
    description="Absolutely positioned text labels",
    category="overlay",
    stack_order=30,
    schema=FreeTextData,
    css=free_text_css,
    html=free_text_html,
    allow_multiple_instances=True,
)
