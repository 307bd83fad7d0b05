"""
Viewport module: the page background (colour or image), an optional blur
layer and an optional gradient overlay. Emits no markup of its own.
"""

from typing import Dict, Literal

from pydantic import Field

from slidegen.modules.helpers import gradient_css, resolve_url
from slidegen.modules.types import CamelModel, GradientOverlay, ModuleDefinition, RenderContext


class Padding(CamelModel):
    top: int = 0
    right: int = 0
    bottom: int = 0
    left: int = 0


class ContentWrapper(CamelModel):
    padding: Padding = Field(default_factory=Padding)
    gap: int = 12
    layout_direction: Literal["column", "row"] = "column"
    content_align: str = "stretch"
    justify_content: str = "flex-start"


class ViewportData(CamelModel):
    background_type: Literal["color", "image"] = "color"
    background_color: str = "#FFFFFF"
    background_image: str = ""
    blur_enabled: bool = False
    blur_amount: int = 0
    gradient_overlay: GradientOverlay = Field(default_factory=GradientOverlay)
    content_wrapper: ContentWrapper = Field(default_factory=ContentWrapper)


def viewport_css(data: ViewportData, context: RenderContext) -> str:
    blocks = []

    if data.background_type == "image" and data.background_image:
        url = resolve_url(data.background_image, context.base_url)
        blocks.append(
            "body {\n"
            f"  background-image: url({url});\n"
            "  background-size: cover;\n"
            "  background-position: center;\n"
            "  background-repeat: no-repeat;\n"
            "}"
        )
    else:
        blocks.append(f"body {{\n  background-color: {data.background_color};\n}}")

    if data.blur_enabled and data.blur_amount > 0:
        blocks.append(
            "body::before {\n"
            "  content: '';\n"
            "  position: absolute;\n"
            "  top: 0; left: 0; right: 0; bottom: 0;\n"
            f"  backdrop-filter: blur({data.blur_amount}px);\n"
            f"  -webkit-backdrop-filter: blur({data.blur_amount}px);\n"
            "  pointer-events: none;\n"
            "  z-index: 0;\n"
            "}"
        )

    gradient = data.gradient_overlay
    if gradient.enabled and gradient.color:
        background = gradient_css(
            gradient.color,
            gradient.start_opacity,
            gradient.mid_opacity,
            gradient.end_opacity,
            gradient.height,
            gradient.direction,
        )
        blocks.append(
            "body::after {\n"
            "  content: '';\n"
            "  position: absolute;\n"
            "  top: 0; left: 0; right: 0; bottom: 0;\n"
            f"  background-image: {background};\n"
            f"  mix-blend-mode: {gradient.blend_mode};\n"
            "  pointer-events: none;\n"
            "  z-index: 9999;\n"
            "}"
        )

    wrapper = data.content_wrapper
    pad = wrapper.padding
    align = wrapper.content_align if wrapper.layout_direction == "row" else "stretch"
    blocks.append(
        ".content-wrapper {\n"
        f"  flex-direction: {wrapper.layout_direction};\n"
        f"  gap: {wrapper.gap}px;\n"
        f"  padding: {pad.top}px {pad.right}px {pad.bottom}px {pad.left}px;\n"
        f"  align-items: {align};\n"
        f"  justify-content: {wrapper.justify_content};\n"
        "}"
    )
    return "\n\n".join(blocks)


def viewport_html(data: ViewportData, context: RenderContext) -> str:
    return ""


def viewport_style_variables(data: ViewportData) -> Dict[str, str]:
    return {
        "viewport-bg-color": data.background_color,
        "viewport-blur": f"{data.blur_amount}px" if data.blur_enabled else "0px",
    }


DEFINITION = ModuleDefinition(
    id="viewport",
    name="Viewport",
    description="Page background, blur and gradient overlay",
    category="layout",
    stack_order=0,
    schema=ViewportData,
    css=viewport_css,
    html=viewport_html,
    style_variables=viewport_style_variables,
)
