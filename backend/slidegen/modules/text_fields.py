"""
Text fields module: up to ten stacked text blocks, each with its own style,
highlight chunks and optional free positioning.
"""

from typing import List, Literal

from pydantic import Field

from slidegen.modules.helpers import position_css, special_position_css
from slidegen.modules.types import (
    CamelModel,
    ModuleDefinition,
    Position,
    RenderContext,
    SpecialPosition,
    StyledChunk,
    TextStyle,
)
from slidegen.rich_text import process_text_field


def _default_style() -> TextStyle:
    return TextStyle(
        font_family="Arial",
        font_size="24px",
        font_weight="400",
        color="#000000",
        text_align="left",
        text_transform="none",
    )


class TextField(CamelModel):
    content: str = ""
    style: TextStyle = Field(default_factory=_default_style)
    styled_chunks: List[StyledChunk] = Field(default_factory=list)
    free_position: bool = False
    position: Position = Field(default_factory=lambda: Position(top="50px", left="50px"))
    special_position: SpecialPosition = "none"
    special_padding: float = Field(default=8, ge=0, le=20)


class TextFieldsData(CamelModel):
    count: int = Field(default=5, ge=1, le=10)
    gap: int = Field(default=20, ge=0, le=200)
    vertical_align: Literal["top", "center", "bottom"] = "bottom"
    layout_width: str = "50%"
    align_self: Literal["auto", "flex-start", "center", "flex-end", "stretch"] = "stretch"
    padding_top: int = 0
    padding_bottom: int = 0
    fields: List[TextField] = Field(default_factory=lambda: [TextField() for _ in range(5)])

    def visible_fields(self):
        for index, field in enumerate(self.fields[: self.count]):
            if field.content:
                yield index, field


_JUSTIFY = {"top": "flex-start", "center": "center", "bottom": "flex-end"}


def _field_position(field: TextField, context: RenderContext) -> str:
    if field.special_position != "none":
        pad_x = f"{context.viewport_width * field.special_padding / 100:g}px"
        pad_y = f"{context.viewport_height * field.special_padding / 100:g}px"
        return special_position_css(field.special_position, pad_x, pad_y)
    return position_css(field.position)


def text_fields_css(data: TextFieldsData, context: RenderContext) -> str:
    item_rules = []
    for index, field in data.visible_fields():
        style = field.style
        optional = []
        if style.text_shadow:
            optional.append(f"text-shadow: {style.text_shadow};")
        if style.text_decoration:
            optional.append(f"text-decoration: {style.text_decoration};")
        if style.background_color:
            optional.append(f"background-color: {style.background_color};")
        if style.padding:
            optional.append(f"padding: {style.padding};")
        position = ""
        if field.free_position:
            position = f"position: absolute; {_field_position(field, context)}"
        item_rules.append(
            f"""
    .text-item-{index + 1} {{
      font-family: {style.font_family or 'Arial'};
      font-size: {style.font_size or '24px'};
      font-weight: {style.font_weight or '400'};
      color: {style.color or '#000000'};
      text-align: {style.text_align or 'left'};
      line-height: {style.line_height or '1.2'};
      letter-spacing: {style.letter_spacing or '0'};
      text-transform: {style.text_transform or 'none'};
      {' '.join(optional)}
      {position}
    }}""".rstrip()
        )

    return f"""
    .text-section {{
      display: flex;
      flex-direction: column;
      gap: {data.gap}px;
      justify-content: {_JUSTIFY.get(data.vertical_align, 'flex-end')};
      align-items: stretch;
      width: 100%;
      flex: 1;
      flex-basis: {data.layout_width or 'auto'};
      align-self: {data.align_self};
      min-width: 0;
      min-height: 0;
      flex-shrink: 1;
      position: relative;
      z-index: 10;
      box-sizing: border-box;
      padding-top: {data.padding_top}px;
      padding-bottom: {data.padding_bottom}px;
    }}

    .text-item {{
      word-wrap: break-word;
      overflow-wrap: break-word;
    }}
{''.join(item_rules)}

    .text-item span[style*="background-color"] {{
      padding: 2px 4px;
      border-radius: 2px;
    }}
    """.strip()


def text_fields_html(data: TextFieldsData, context: RenderContext) -> str:
    items = []
    for index, field in data.visible_fields():
        content = process_text_field(field.content, field.styled_chunks, field.style if field.styled_chunks else None)
        items.append(f'    <div class="text-item text-item-{index + 1}">{content}</div>')
    return '<div class="text-section">\n' + "\n".join(items) + "\n  </div>"


DEFINITION = ModuleDefinition(
    id="textFields",
    name="Text Fields",
    description="Stacked text blocks with per-field styling and highlights",
    category="content",
    stack_order=10,
    schema=TextFieldsData,
    css=text_fields_css,
    html=text_fields_html,
    allow_multiple_instances=True,
)
