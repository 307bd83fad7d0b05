"""
Content image module: a single image, or two images side by side in
comparison mode.
"""

from typing import Literal

from pydantic import Field

from slidegen.modules.helpers import escape_html, resolve_url
from slidegen.modules.types import CamelModel, ModuleDefinition, RenderContext


class ContentImageShadow(CamelModel):
    enabled: bool = False
    blur: float = Field(default=20, ge=0)
    spread: float = 0
    color: str = "rgba(0, 0, 0, 0.3)"


class ContentImageData(CamelModel):
    enabled: bool = True
    url: str = ""
    border_radius: float = Field(default=20, ge=0)
    max_width: float = Field(default=100, ge=0, le=100)
    max_height: float = Field(default=100, ge=0, le=100)
    object_fit: Literal["cover", "contain", "fill"] = "cover"
    position: Literal["top", "center", "bottom"] = "center"
    shadow: ContentImageShadow = Field(default_factory=ContentImageShadow)
    mode: Literal["single", "comparison"] = "single"
    comparison_gap: float = Field(default=40, ge=0)
    url2: str = ""
    layout_width: str = "50%"
    align_self: Literal["auto", "flex-start", "center", "flex-end", "stretch"] = "stretch"
    custom_styles: str = ""


_ALIGN = {"top": "flex-start", "bottom": "flex-end"}


def content_image_css(data: ContentImageData, context: RenderContext) -> str:
    if not data.enabled:
        return ".content-image-section {\n  display: none;\n}"

    shadow = "none"
    if data.shadow.enabled:
        shadow = f"0 0 {data.shadow.blur}px {data.shadow.spread}px {data.shadow.color}"
    align = _ALIGN.get(data.position, "center")
    has_image = bool(data.url or (data.mode == "comparison" and data.url2))

    section = f"""
    .content-image-section {{
      flex: 1 1 auto;
      flex-basis: {data.layout_width or 'auto'};
      align-self: {data.align_self};
      min-width: 0;
      flex-shrink: 1;
      z-index: 5;
      position: relative;
      display: {'flex' if has_image else 'none'};
      min-height: 0;
      align-items: {align};
      justify-content: center;
      {data.custom_styles}
    }}"""

    if data.mode == "single":
        return f"""{section}

    .content-image {{
      max-width: {data.max_width}%;
      max-height: {data.max_height}%;
      width: auto;
      height: auto;
      object-fit: {data.object_fit};
      object-position: {data.position};
      border-radius: {data.border_radius}px;
      box-shadow: {shadow};
      display: block;
    }}
    """.strip()

    return f"""{section}

    .comparison-row {{
      width: 100%;
      height: 100%;
      display: flex;
      gap: {data.comparison_gap}px;
      align-items: {align};
      justify-content: center;
    }}

    .comparison-image {{
      flex: 1;
      max-width: {data.max_width}%;
      max-height: {data.max_height}%;
      border-radius: {data.border_radius}px;
      overflow: hidden;
    }}

    .comparison-image img {{
      width: 100%;
      height: 100%;
      object-fit: {data.object_fit};
      object-position: {data.position};
      box-shadow: {shadow};
      display: block;
    }}
    """.strip()


def content_image_html(data: ContentImageData, context: RenderContext) -> str:
    if not data.enabled or not (data.url or data.url2):
        return ""

    first = escape_html(resolve_url(data.url, context.base_url))
    if data.mode == "single":
        return (
            '<div class="content-image-section">\n'
            f'    <img class="content-image" src="{first}" alt="Content" />\n'
            "  </div>"
        )

    second = escape_html(resolve_url(data.url2, context.base_url))
    return (
        '<div class="content-image-section">\n'
        '    <div class="comparison-row">\n'
        f'      <div class="comparison-image"><img src="{first}" alt="Image 1" /></div>\n'
        f'      <div class="comparison-image"><img src="{second}" alt="Image 2" /></div>\n'
        "    </div>\n"
        "  </div>"
    )


DEFINITION = ModuleDefinition(
    id="contentImage",
    name="Content Image",
    description="Image inside the card, single or comparison",
    category="content",
    stack_order=5,
    schema=ContentImageData,
    css=content_image_css,
    html=content_image_html,
    allow_multiple_instances=True,
)
