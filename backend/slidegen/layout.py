"""
Carousel layout: canvas geometry for 1..N slides, the clip rectangles used
to cut one image per slide, and the floating overlay image that spans the
whole canvas.
"""

import logging
import re
from dataclasses import dataclass
from typing import List, Optional, Union

from pydantic import Field
from pydantic import ValidationError as PydanticValidationError

from slidegen.errors import ValidationError
from slidegen.modules.helpers import escape_html, resolve_url
from slidegen.modules.types import CamelModel

logger = logging.getLogger(__name__)

UNIT_WIDTH = 1080
UNIT_HEIGHT = 1440

MIN_OVERLAY_SCALE = 0.5
MAX_OVERLAY_SCALE = 2.0
MAX_OVERLAY_ROTATION = 180.0


@dataclass(frozen=True)
class ClipRect:
    x: int
    y: int
    width: int
    height: int

    def to_dict(self) -> dict:
        return {"x": self.x, "y": self.y, "width": self.width, "height": self.height}


@dataclass(frozen=True)
class CanvasGeometry:
    slide_count: int
    unit_width: int = UNIT_WIDTH
    unit_height: int = UNIT_HEIGHT

    @property
    def canvas_width(self) -> int:
        return self.slide_count * self.unit_width

    @property
    def canvas_height(self) -> int:
        return self.unit_height

    @property
    def is_carousel(self) -> bool:
        return self.slide_count >= 2

    @property
    def slide_clip_rects(self) -> List[ClipRect]:
        return [
            ClipRect(x=index * self.unit_width, y=0, width=self.unit_width, height=self.unit_height)
            for index in range(self.slide_count)
        ]

    def to_dict(self) -> dict:
        return {
            "slideCount": self.slide_count,
            "canvasWidth": self.canvas_width,
            "canvasHeight": self.canvas_height,
            "slideClipRects": [rect.to_dict() for rect in self.slide_clip_rects],
        }


def layout(slide_count: int, unit_width: int = UNIT_WIDTH, unit_height: int = UNIT_HEIGHT) -> CanvasGeometry:
    """Geometry for ``slide_count`` slides laid out left to right."""
    if slide_count < 1:
        raise ValidationError("A carousel needs at least one slide", field_path="slides")
    return CanvasGeometry(slide_count=slide_count, unit_width=unit_width, unit_height=unit_height)


# Floating overlay image

class OutlineEffect(CamelModel):
    enabled: bool = False
    color: str = "#FFFFFF"
    size: float = 2


class FreeImageConfig(CamelModel):
    enabled: bool = False
    url: str = ""
    offset_x: float = 0
    offset_y: float = 0
    scale: float = 1
    rotation: float = 0
    outline_effect: OutlineEffect = Field(default_factory=OutlineEffect)


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def validate_free_image_config(
    config: Union[FreeImageConfig, dict, None],
    slide_count: int = 2,
) -> Optional[FreeImageConfig]:
    """Normalized overlay config, or None when the overlay must not be drawn.

    A single slide never gets an overlay, whatever the stored config says.
    """
    if config is None:
        return None
    if isinstance(config, dict):
        try:
            config = FreeImageConfig.model_validate(config)
        except PydanticValidationError as e:
            issues = [
                {"path": list(issue["loc"]), "message": issue["msg"], "code": issue["type"]} for issue in e.errors()
            ]
            raise ValidationError("Invalid freeImage config", field_path="freeImage", issues=issues) from e
    if not config.enabled or not config.url:
        return None
    if slide_count < 2:
        logger.info("Free image overlay ignored: single slide")
        return None
    return config.model_copy(
        update={
            "scale": _clamp(config.scale, MIN_OVERLAY_SCALE, MAX_OVERLAY_SCALE),
            "rotation": _clamp(config.rotation, -MAX_OVERLAY_ROTATION, MAX_OVERLAY_ROTATION),
        }
    )


def overlay_transform(config: FreeImageConfig) -> str:
    """Center on the anchor, then offset, then scale, then rotate."""
    return " ".join(
        [
            "translate(-50%, -50%)",
            f"translate({config.offset_x:g}px, {config.offset_y:g}px)",
            f"scale({config.scale:g})",
            f"rotate({config.rotation:g}deg)",
        ]
    )


def outline_filter(effect: OutlineEffect) -> str:
    size = f"{effect.size:g}"
    color = effect.color
    offsets = [
        (f"{size}px", "0"),
        (f"-{size}px", "0"),
        ("0", f"{size}px"),
        ("0", f"-{size}px"),
        (f"{size}px", f"{size}px"),
        (f"-{size}px", f"{size}px"),
        (f"{size}px", f"-{size}px"),
        (f"-{size}px", f"-{size}px"),
    ]
    return " ".join(f"drop-shadow({x} {y} 0 {color})" for x, y in offsets)


def carousel_css(geometry: CanvasGeometry, free_image: Optional[FreeImageConfig] = None) -> str:
    css = f"""body {{
  width: {geometry.canvas_width}px;
  height: {geometry.canvas_height}px;
  margin: 0;
  padding: 0;
  overflow: hidden;
}}

.carousel-wrapper {{
  display: flex;
  flex-direction: row;
  width: {geometry.canvas_width}px;
  height: {geometry.canvas_height}px;
}}

.carousel-slide {{
  width: {geometry.unit_width}px;
  height: {geometry.unit_height}px;
  position: relative;
  flex-shrink: 0;
  display: flex;
  flex-direction: column;
  overflow: hidden;
}}"""

    if free_image is not None:
        filter_rule = ""
        if free_image.outline_effect.enabled:
            filter_rule = f"\n  filter: {outline_filter(free_image.outline_effect)};"
        css += f"""

.free-image {{
  position: absolute;
  left: 50%;
  top: 50%;
  transform: {overlay_transform(free_image)};
  z-index: 100;
  pointer-events: none;{filter_rule}
}}"""
    return css


def wrap_in_carousel(
    slide_htmls: List[str],
    free_image: Optional[FreeImageConfig] = None,
    base_url: str = "",
) -> str:
    if not slide_htmls:
        return '<div class="carousel-wrapper"></div>'

    slides = "\n".join(
        f'  <div class="carousel-slide carousel-slide-{index + 1}">\n    {html}\n  </div>'
        for index, html in enumerate(slide_htmls)
    )
    body = f'<div class="carousel-wrapper">\n{slides}\n</div>'
    if free_image is not None:
        src = escape_html(resolve_url(free_image.url, base_url))
        body += f'\n<!-- Free image overlay -->\n<img class="free-image" src="{src}" alt="Free Image">'
    return body


# Per-slide CSS scoping

_COMMENT_RE = re.compile(r"/\*.*?\*/", re.DOTALL)
_RULE_RE = re.compile(r"([^{}]+)\{")
_ROOT_SELECTOR_RE = re.compile(r"^(body|html|:root)(?![\w-])")


def _scope_selector(selector: str, scope: str) -> str:
    selector = selector.strip()
    if not selector:
        return selector
    if _ROOT_SELECTOR_RE.match(selector):
        return _ROOT_SELECTOR_RE.sub(scope, selector, count=1)
    return f"{scope} {selector}"


def scope_css(css: str, scope: str) -> str:
    """Prefix every selector in ``css`` with ``scope``.

    ``body``/``html``/``:root`` become the scope element itself. At-rules are
    left alone.
    """

    def _rewrite(match: "re.Match") -> str:
        selectors = match.group(1)
        if selectors.strip().startswith("@"):
            return match.group(0)
        scoped = ", ".join(_scope_selector(part, scope) for part in selectors.split(","))
        return f"\n{scoped} {{"

    return _RULE_RE.sub(_rewrite, _COMMENT_RE.sub("", css)).strip()
