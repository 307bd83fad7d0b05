"""Logo module: a brand image pinned to a corner of the canvas."""

from typing import Literal, Optional, Union

from pydantic import Field

from slidegen.modules.helpers import css_length, escape_html, resolve_url, special_position_css
from slidegen.modules.types import CamelModel, ModuleDefinition, RenderContext, SpecialPosition

LogoFilter = Literal["none", "grayscale", "invert", "brightness", "white", "black"]


class LogoData(CamelModel):
    enabled: bool = False
    logo_url: str = ""
    width: Union[str, int] = "120px"
    height: Union[str, int] = "auto"
    special_position: SpecialPosition = "top-left"
    top: Optional[Union[str, int]] = None
    left: Optional[Union[str, int]] = None
    right: Optional[Union[str, int]] = None
    bottom: Optional[Union[str, int]] = None
    padding_x: float = Field(default=40, ge=0, le=500)
    padding_y: float = Field(default=40, ge=0, le=500)
    opacity: float = Field(default=1, ge=0, le=1)
    filter: LogoFilter = "none"
    filter_intensity: float = Field(default=100, ge=0, le=200)

    @property
    def visible(self) -> bool:
        return self.enabled and bool(self.logo_url.strip()) and self.logo_url != "none"


def _filter(data: LogoData) -> str:
    amount = data.filter_intensity / 100
    if data.filter == "grayscale":
        return f"grayscale({amount})"
    if data.filter == "invert":
        return f"invert({amount})"
    if data.filter == "brightness":
        return f"brightness({amount})"
    if data.filter == "white":
        return "brightness(0) invert(1)"
    if data.filter == "black":
        return "brightness(0)"
    return "none"


def logo_css(data: LogoData, context: RenderContext) -> str:
    if not data.visible:
        return ""
    if data.special_position != "none":
        placement = special_position_css(data.special_position, f"{data.padding_x:g}px", f"{data.padding_y:g}px")
    else:
        placement = " ".join(
            f"{prop}: {css_length(getattr(data, prop))};"
            for prop in ("top", "left", "right", "bottom")
            if getattr(data, prop) is not None
        )
    return f"""
    .logo-container {{
      position: absolute;
      {placement}
      z-index: 30;
      opacity: {data.opacity};
    }}

    .logo-container img {{
      width: {css_length(data.width)};
      height: {css_length(data.height)};
      display: block;
      filter: {_filter(data)};
    }}
    """.strip()


def logo_html(data: LogoData, context: RenderContext) -> str:
    if not data.visible:
        return ""
    src = escape_html(resolve_url(data.logo_url, context.base_url))
    return f'<div class="logo-container">\n    <img src="{src}" alt="Logo" />\n  </div>'


DEFINITION = ModuleDefinition(
    id="logo",
    name="Logo",
    description="Brand image pinned to the canvas",
    category="overlay",
    stack_order=30,
    schema=LogoData,
    css=logo_css,
    html=logo_html,
)
