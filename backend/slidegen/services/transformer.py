"""
Carousel transformer: turns validated carousel JSON into flat template
layouts ready for the batch renderer.
"""

import copy
import logging
import re
from typing import List, Optional

from pydantic import ValidationError as PydanticValidationError

from slidegen.carousel_schema import (
    TEXT_KEYS,
    CanonicalCarousel,
    CanonicalSlide,
    DestaqueChunk,
    PhotoSource,
    validate_carousel_data,
)
from slidegen.config import get_settings
from slidegen.errors import ValidationError
from slidegen.layout_bases import get_layout_base
from slidegen.modules.types import CamelModel

logger = logging.getLogger(__name__)

_UNSAFE_RE = re.compile(r"[<>{}]")

REVERSE_CARD_STYLES = "flex-direction: column-reverse; justify-content: flex-end;"
REVERSE_IMAGE_STYLES = "margin-top: 5%;"

DEFAULT_STACK_IMG_GRADIENT = {
    "enabled": True,
    "color": "#000000",
    "startOpacity": 0.7,
    "midOpacity": 0.4,
    "height": 60,
    "direction": "to top",
}


class CardGradientOverride(CamelModel):
    color: Optional[str] = None
    start_opacity: Optional[float] = None
    mid_opacity: Optional[float] = None
    height: Optional[float] = None
    direction: Optional[str] = None


def sanitize_text(text) -> str:
    if not isinstance(text, str):
        return ""
    return _UNSAFE_RE.sub("", text)


def convert_destaques_new(
    text: str,
    chunks: List[DestaqueChunk],
    highlight_color: str,
    bold_only: bool = False,
) -> List[dict]:
    """Styled chunks for the highlight spans that occur in ``text``."""
    if not text or not chunks:
        return []
    clean = sanitize_text(text)
    styled = []
    for chunk in chunks:
        trecho = sanitize_text(chunk.trecho)
        if not trecho or trecho not in clean:
            logger.warning(f"Highlight not found in text: {trecho!r}")
            continue
        result = {"text": trecho}
        if chunk.tipo in ("bold", "bold+italic"):
            result["bold"] = True
        if chunk.tipo in ("italic", "bold+italic"):
            result["italic"] = True
        is_background = chunk.tipo.startswith("bg4")
        if is_background:
            result["backgroundColor"] = "#ffffff" if "secondary" in chunk.tipo else highlight_color
            result["padding"] = "4px"
        if chunk.cor and not bold_only and not is_background:
            result["color"] = highlight_color
        styled.append(result)
    return styled


def convert_destaques_old(text: str, highlights: List[str], color: str, bold_only: bool = False) -> List[dict]:
    if not text or not highlights:
        return []
    clean = sanitize_text(text)
    styled = []
    for highlight in (sanitize_text(h) for h in highlights):
        if not highlight:
            continue
        if highlight not in clean:
            logger.warning(f"Highlight not found in text: {highlight!r}")
            continue
        styled.append({"text": highlight, "bold": True} if bold_only else {"text": highlight, "color": color})
    return styled


def _font_size_plus(size: Optional[str], delta: int) -> str:
    match = re.match(r"^\s*(\d+)", size or "36px")
    current = int(match.group(1)) if match else 36
    return f"{current + delta}px"


def transform_stack_slide(
    slide: CanonicalSlide,
    base: dict,
    highlight_color: str,
    highlight_color_secondary: str,
) -> dict:
    estilo = slide.base_estilo
    is_fitfeed = estilo.startswith("ff_")
    bold_only = estilo == "stack-img"
    color = highlight_color_secondary if estilo.endswith("-b") else highlight_color
    layout = copy.deepcopy(base)

    if not is_fitfeed:
        for number in range(1, 6):
            layout[f"text{number}StyledChunks"] = []
        layout["customCardContainerStyles"] = ""
        layout["customContentImageSectionStyles"] = ""

        if slide.is_reverse:
            layout["customCardContainerStyles"] = REVERSE_CARD_STYLES
            layout["customContentImageSectionStyles"] = REVERSE_IMAGE_STYLES
            top = layout.get("textPaddingTop")
            bottom = layout.get("textPaddingBottom")
            if top is not None:
                layout["textPaddingBottom"] = top
            if bottom is not None:
                layout["textPaddingTop"] = bottom
            elif top is not None:
                layout["textPaddingTop"] = 0

    if estilo == "stack-img":
        for number in range(1, 6):
            layout[f"text{number}Style"] = {**(layout.get(f"text{number}Style") or {}), "color": "#ffffff"}
        gradient = layout.get("cardGradientOverlay")
        if isinstance(gradient, dict):
            layout["cardGradientOverlay"] = {**DEFAULT_STACK_IMG_GRADIENT, **{k: v for k, v in gradient.items() if v is not None}, "enabled": True}
        else:
            layout["cardGradientOverlay"] = dict(DEFAULT_STACK_IMG_GRADIENT)

    for number, key in enumerate(TEXT_KEYS, start=1):
        text = slide.text(key)
        text_key, style_key, chunks_key = f"text{number}", f"text{number}Style", f"text{number}StyledChunks"
        is_principal = slide.texto_principal == key

        if not text or not text.strip():
            if not is_fitfeed:
                layout[text_key] = ""
                layout[chunks_key] = []
            continue

        layout[text_key] = sanitize_text(text)

        if is_principal and layout.get(style_key):
            style = layout[style_key]
            layout[style_key] = {**style, "fontSize": _font_size_plus(style.get("fontSize"), 12), "fontWeight": "700"}

        chunks = convert_destaques_new(text, slide.destaques.for_field(key), color, bold_only)
        if is_principal:
            chunks = [{**chunk, "fontWeight": "900"} if chunk.get("bold") else chunk for chunk in chunks]
        if chunks:
            layout[chunks_key] = chunks

    return layout


def transform_fitfeed_capa_slide(slide: CanonicalSlide, base: dict, highlight_color: str) -> dict:
    layout = copy.deepcopy(base)
    title = slide.titulo or slide.texto_1
    if title:
        layout["title"] = sanitize_text(title)

    if slide.title_special_styling is not None:
        layout["titleSpecialStyling"] = slide.title_special_styling.model_dump(by_alias=True, exclude_none=True)

    special = (layout.get("titleSpecialStyling") or {}).get("enabled")
    if not special:
        chunks = convert_destaques_new(layout.get("title", ""), slide.destaques.for_field("titulo"), highlight_color)
        if chunks:
            layout["titleStyledChunks"] = chunks
    return layout


def _apply_photo(layout: dict, estilo: str, photo: Optional[PhotoSource], numero: int) -> None:
    if photo is None:
        return
    url = None
    if estilo == "ff_capa":
        url = photo.landscape or photo.portrait or photo.original
        if url:
            layout["viewportBackgroundImage"] = url
            layout["viewportBackgroundType"] = "image"
    elif estilo == "stack-img":
        url = photo.portrait or photo.original
        if url:
            layout["cardBackgroundImage"] = url
    elif estilo == "stack-img-bg" or estilo.startswith("ff_"):
        url = photo.landscape or photo.original
        if url:
            layout["contentImageUrl"] = url
    if not url:
        logger.warning(f"No suitable photo found for slide #{numero} (estilo: {estilo})")


def transform_carousel(
    carousel: CanonicalCarousel,
    highlight_color: Optional[str] = None,
    highlight_color_secondary: Optional[str] = None,
    card_gradient: Optional[CardGradientOverride] = None,
) -> List[dict]:
    settings = get_settings()
    highlight_color = highlight_color or settings.highlight_color
    highlight_color_secondary = highlight_color_secondary or settings.highlight_color_secondary
    total = len(carousel.slides)
    layouts = []

    for slide in carousel.slides:
        estilo = slide.base_estilo
        base = get_layout_base(estilo)
        if base is None:
            raise ValidationError(f"Failed to load layout template: {estilo}", field_path="estilo")
        is_fitfeed = estilo.startswith("ff_")

        if estilo == "ff_capa":
            layout = transform_fitfeed_capa_slide(slide, base, highlight_color)
        else:
            layout = transform_stack_slide(slide, base, highlight_color, highlight_color_secondary)
            if not is_fitfeed:
                layout["freeText1"] = f"{slide.numero}/{total}"

        _apply_photo(layout, estilo, carousel.photo_for(slide.numero), slide.numero)

        if card_gradient is not None and not is_fitfeed and layout.get("cardGradientOverlay"):
            override = card_gradient.model_dump(by_alias=True, exclude_none=True)
            layout["cardGradientOverlay"] = {**layout["cardGradientOverlay"], **override}

        logger.info(f"Transformed slide #{slide.numero} ({slide.estilo})")
        layouts.append(layout)

    return layouts


def process_carousel_data(
    data,
    highlight_color: Optional[str] = None,
    highlight_color_secondary: Optional[str] = None,
    card_gradient: Optional[dict] = None,
) -> List[dict]:
    """Validate and transform in one step. Raises ValidationError on bad input."""
    carousel = validate_carousel_data(data)
    try:
        override = CardGradientOverride.model_validate(card_gradient) if card_gradient else None
    except PydanticValidationError as e:
        raise ValidationError(f"Invalid cardGradient: {e}", field_path="cardGradient") from e
    return transform_carousel(carousel, highlight_color, highlight_color_secondary, override)
