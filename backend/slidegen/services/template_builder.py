"""
Template builders: turn a flat template layout (the transformer's output and
the batch endpoint's input) into a module Slide the composer can render.

Two template kinds exist:

* ``stack`` - up to five text fields, optional content image, card
  background photo and gradient, slide counter
* ``fitfeed-capa`` - cover with a title over a full-bleed background, logo,
  arrow and bottom call-to-action text
"""

import logging
from typing import Dict, List, Optional, Union

from pydantic import Field
from pydantic import ValidationError as PydanticValidationError

from slidegen.carousel_schema import TitleSpecialStyling
from slidegen.errors import ValidationError
from slidegen.layout import UNIT_HEIGHT, UNIT_WIDTH
from slidegen.modules.types import CamelModel, Slide, StyledChunk, TextStyle

logger = logging.getLogger(__name__)

Length = Union[int, float, str]


def _default_text_style() -> TextStyle:
    return TextStyle(font_family="Montserrat", font_size="36px", font_weight="400", color="#000000", text_align="left")


class CardGradient(CamelModel):
    enabled: bool = False
    color: str = "#000000"
    start_opacity: float = 0.7
    mid_opacity: float = 0.3
    end_opacity: float = 0.0
    height: float = 50
    direction: str = "to top"


class StackLayout(CamelModel):
    template: str = "stack"
    viewport_background_color: str = "#ffffff"

    text1: str = ""
    text2: str = ""
    text3: str = ""
    text4: str = ""
    text5: str = ""
    text1_style: TextStyle = Field(default_factory=_default_text_style)
    text2_style: TextStyle = Field(default_factory=_default_text_style)
    text3_style: TextStyle = Field(default_factory=_default_text_style)
    text4_style: TextStyle = Field(default_factory=_default_text_style)
    text5_style: TextStyle = Field(default_factory=_default_text_style)
    text1_styled_chunks: List[StyledChunk] = Field(default_factory=list)
    text2_styled_chunks: List[StyledChunk] = Field(default_factory=list)
    text3_styled_chunks: List[StyledChunk] = Field(default_factory=list)
    text4_styled_chunks: List[StyledChunk] = Field(default_factory=list)
    text5_styled_chunks: List[StyledChunk] = Field(default_factory=list)
    text_gap: int = 20
    text_vertical_align: str = "bottom"
    text_padding_top: Optional[Length] = None
    text_padding_bottom: Optional[Length] = None

    card_width: float = 90
    card_height: float = 90
    card_border_radius: float = 20
    card_background_color: str = "#ffffff"
    card_background_image: str = ""
    card_padding: float = 60
    card_gradient_overlay: Optional[CardGradient] = None
    custom_card_container_styles: str = ""

    content_image_url: str = ""
    content_image_border_radius: float = 20
    custom_content_image_section_styles: str = ""

    free_text1: str = ""
    free_text1_style: Optional[TextStyle] = None
    logo_image_url: str = ""

    def texts(self):
        for number in range(1, 6):
            yield (
                getattr(self, f"text{number}"),
                getattr(self, f"text{number}_style"),
                getattr(self, f"text{number}_styled_chunks"),
            )

    def has_text(self) -> bool:
        return any(text.strip() for text, _, _ in self.texts())


class FitFeedCapaLayout(CamelModel):
    template: str = "fitfeed-capa"
    viewport_background_type: str = "color"
    viewport_background_color: str = "#000000"
    viewport_background_image: str = ""
    viewport_gradient_overlay: Optional[CardGradient] = None

    title: str = ""
    title_styled_chunks: List[StyledChunk] = Field(default_factory=list)
    title_style: TextStyle = Field(
        default_factory=lambda: TextStyle(
            font_family="Bebas Neue",
            font_size="72px",
            font_weight="900",
            color="#ffffff",
            text_align="left",
            text_transform="uppercase",
            letter_spacing="-1px",
            line_height="1.2",
        )
    )
    title_special_styling: Optional[TitleSpecialStyling] = None

    logo_image_url: str = ""
    logo_color: str = "#ffffff"
    logo_image_special_position: str = "top-left"
    logo_image_special_padding: float = 5

    arrow_image_url: str = ""
    arrow_color: str = "#ffffff"
    arrow_image_special_position: str = "bottom-right"
    arrow_image_special_padding: float = 6

    bottom_text: str = ""
    bottom_text_special_position: str = "bottom-right"
    bottom_text_special_padding: float = 3
    bottom_text_style: TextStyle = Field(
        default_factory=lambda: TextStyle(
            font_family="Montserrat",
            font_size="18px",
            font_weight="700",
            color="#ffffff",
            text_transform="uppercase",
        )
    )


def _px(value: Optional[Length]) -> int:
    if value is None or value == "":
        return 0
    if isinstance(value, str):
        value = value.strip().removesuffix("px")
        return int(float(value)) if value else 0
    return int(value)


def _gradient(gradient: Optional[CardGradient]) -> dict:
    if gradient is None:
        return {"enabled": False}
    return gradient.to_dict()


def build_stack_slide(layout: StackLayout, slide_id: str = "slide-1") -> Slide:
    if not layout.has_text():
        raise ValidationError("At least one text field must have content", field_path="text1")

    fields = [
        {"content": text, "style": style.to_dict(), "styledChunks": [chunk.to_dict() for chunk in chunks]}
        for text, style, chunks in layout.texts()
    ]
    pad = layout.card_padding
    data: Dict[str, dict] = {
        "viewport": {"backgroundType": "color", "backgroundColor": layout.viewport_background_color},
        "card": {
            "enabled": True,
            "width": layout.card_width,
            "height": layout.card_height,
            "borderRadius": layout.card_border_radius,
            "backgroundType": "image" if layout.card_background_image else "color",
            "backgroundColor": layout.card_background_color,
            "backgroundImage": layout.card_background_image,
            "padding": {"top": pad, "right": pad, "bottom": pad, "left": pad},
            "gradientOverlay": _gradient(layout.card_gradient_overlay),
            "layoutDirection": "column",
            "contentGap": "0px",
            "customStyles": layout.custom_card_container_styles,
        },
        "textFields": {
            "count": 5,
            "gap": layout.text_gap,
            "verticalAlign": layout.text_vertical_align,
            "layoutWidth": "auto",
            "paddingTop": _px(layout.text_padding_top),
            "paddingBottom": _px(layout.text_padding_bottom),
            "fields": fields,
        },
    }
    enabled = ["viewport", "card", "textFields"]

    if layout.content_image_url:
        enabled.append("contentImage")
        data["contentImage"] = {
            "enabled": True,
            "url": layout.content_image_url,
            "borderRadius": layout.content_image_border_radius,
            "objectFit": "cover",
            "layoutWidth": "auto",
            "customStyles": layout.custom_content_image_section_styles,
        }

    if layout.free_text1:
        enabled.append("freeText")
        style = layout.free_text1_style or TextStyle(font_size="24px", font_weight="600", color="#ffffff")
        data["freeText"] = {
            "count": 1,
            "texts": [
                {
                    "content": layout.free_text1,
                    "style": style.to_dict(),
                    "specialPosition": "top-right",
                    "specialPadding": 4,
                }
            ],
        }

    if layout.logo_image_url:
        enabled.append("logo")
        data["logo"] = {"enabled": True, "logoUrl": layout.logo_image_url, "specialPosition": "top-left"}

    return Slide(id=slide_id, enabled_modules=enabled, data=data)


def _title_chunks(layout: FitFeedCapaLayout) -> List[dict]:
    """Per-line chunks when special styling is on, the highlight chunks otherwise."""
    styling = layout.title_special_styling
    if not styling or not styling.enabled or not styling.line_styles:
        return [chunk.to_dict() for chunk in layout.title_styled_chunks]
    chunks = []
    for line, style in zip(layout.title.split("\n"), styling.line_styles):
        if not line.strip():
            continue
        chunk = StyledChunk(
            text=line,
            color=style.color,
            font_family=style.font_family,
            font_size=style.font_size,
            font_weight=style.font_weight,
            bold=bool(style.bold),
            italic=bool(style.italic),
            letter_spacing=style.letter_spacing,
            background_color=style.background_color,
            padding=style.padding,
        )
        chunks.append(chunk.to_dict())
    return chunks


def _percent_px(percent: float, axis: int) -> int:
    return int(axis * percent / 100)


def build_fitfeed_capa_slide(layout: FitFeedCapaLayout, slide_id: str = "slide-1") -> Slide:
    if not layout.title.strip():
        raise ValidationError("Title field must have content for fitfeed-capa template", field_path="title")

    has_image = layout.viewport_background_type == "image" or bool(layout.viewport_background_image)
    data: Dict[str, dict] = {
        "viewport": {
            "backgroundType": "image" if has_image and layout.viewport_background_image else "color",
            "backgroundColor": layout.viewport_background_color,
            "backgroundImage": layout.viewport_background_image,
            "gradientOverlay": _gradient(layout.viewport_gradient_overlay),
            "contentWrapper": {
                "padding": {"top": 0, "right": 80, "bottom": 220, "left": 80},
                "justifyContent": "flex-end",
            },
        },
        "textFields": {
            "count": 1,
            "verticalAlign": "bottom",
            "layoutWidth": "auto",
            "fields": [
                {
                    "content": layout.title,
                    "style": layout.title_style.to_dict(),
                    "styledChunks": _title_chunks(layout),
                }
            ],
        },
    }
    enabled = ["viewport", "textFields"]

    if layout.logo_image_url:
        enabled.append("logo")
        data["logo"] = {
            "enabled": True,
            "logoUrl": layout.logo_image_url,
            "width": "160px",
            "specialPosition": layout.logo_image_special_position,
            "paddingX": _percent_px(layout.logo_image_special_padding, UNIT_WIDTH),
            "paddingY": _percent_px(layout.logo_image_special_padding, UNIT_HEIGHT),
        }

    if layout.arrow_image_url:
        enabled.append("corners")
        corners = [{"type": "none"} for _ in range(4)]
        corners[3] = {
            "type": "svg",
            "svgUrl": layout.arrow_image_url,
            "svgColor": layout.arrow_color,
            "specialPosition": layout.arrow_image_special_position,
            "paddingX": _percent_px(layout.arrow_image_special_padding, UNIT_WIDTH),
            "paddingY": _percent_px(layout.arrow_image_special_padding, UNIT_HEIGHT),
        }
        data["corners"] = {"corners": corners}

    if layout.bottom_text:
        enabled.append("freeText")
        data["freeText"] = {
            "count": 1,
            "texts": [
                {
                    "content": layout.bottom_text,
                    "style": layout.bottom_text_style.to_dict(),
                    "specialPosition": layout.bottom_text_special_position,
                    "specialPadding": layout.bottom_text_special_padding,
                }
            ],
        }

    return Slide(id=slide_id, enabled_modules=enabled, data=data)


TEMPLATE_KINDS: Dict[str, tuple] = {
    "stack": (StackLayout, build_stack_slide),
    "fitfeed-capa": (FitFeedCapaLayout, build_fitfeed_capa_slide),
}


def template_kind(layout: dict) -> str:
    return "fitfeed-capa" if layout.get("template") == "fitfeed-capa" else "stack"


def build_slide(layout: Union[dict, CamelModel], slide_id: str = "slide-1") -> Slide:
    """Validate a flat layout against its template kind and build the slide."""
    if isinstance(layout, CamelModel):
        layout = layout.to_dict()
    kind = template_kind(layout)
    schema, builder = TEMPLATE_KINDS[kind]
    try:
        parsed = schema.model_validate(layout)
    except PydanticValidationError as e:
        raise ValidationError(f"Invalid {kind} layout: {e}", field_path="layout") from e
    return builder(parsed, slide_id)


def list_template_kinds() -> List[dict]:
    return [{"id": kind, "fields": sorted(schema.model_fields)} for kind, (schema, _) in TEMPLATE_KINDS.items()]
