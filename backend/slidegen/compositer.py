"""
Composer: merges shared and per-slide module data, runs every enabled module
and assembles the final HTML document for one slide or a carousel.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple, Union

from pydantic import Field

from slidegen.errors import ModuleCompositionError, ValidationError
from slidegen.layout import (
    CanvasGeometry,
    ClipRect,
    FreeImageConfig,
    carousel_css,
    layout,
    scope_css,
    validate_free_image_config,
    wrap_in_carousel,
)
from slidegen.modules.helpers import deep_merge
from slidegen.modules.registry import ModuleRegistry, get_registry
from slidegen.modules.types import CamelModel, ModuleDefinition, RenderContext, Slide

logger = logging.getLogger(__name__)

_Z_INDEX_RE = re.compile(r"z-index:\s*\d+")


class RenderOrderEntry(CamelModel):
    id: str
    module_id: str


class CompositionConfig(CamelModel):
    """Manual ordering of content modules plus per-instance z-index overrides."""

    render_order: List[RenderOrderEntry] = Field(default_factory=list)
    z_index_overrides: Dict[str, int] = Field(default_factory=dict)

    def check(self, registry: ModuleRegistry) -> None:
        seen = set()
        for index, entry in enumerate(self.render_order):
            path = f"compositionConfig.renderOrder[{index}]"
            definition = registry.get(entry.module_id)
            if definition is None:
                raise ValidationError(f"Unknown module '{entry.module_id}' in render order", field_path=path)
            if definition.category != "content":
                raise ValidationError(
                    f"Module '{entry.module_id}' is not a content module and cannot be reordered",
                    field_path=path,
                )
            if entry.module_id in seen:
                raise ValidationError(f"Module '{entry.module_id}' appears twice in render order", field_path=path)
            seen.add(entry.module_id)


@dataclass
class ComposeOptions:
    base_url: str = "http://localhost:8000"
    composition_config: Optional[CompositionConfig] = None
    free_image: Union[FreeImageConfig, dict, None] = None
    registry: Optional[ModuleRegistry] = None


@dataclass
class ComposedDocument:
    html: str
    css: str
    canvas_width: int
    canvas_height: int
    style_variables: Dict[str, str]
    geometry: CanvasGeometry
    diagnostics: List[ModuleCompositionError] = field(default_factory=list)

    @property
    def clip_rects(self) -> List[ClipRect]:
        return self.geometry.slide_clip_rects

    @property
    def slide_count(self) -> int:
        return self.geometry.slide_count

    def to_dict(self) -> dict:
        return {
            "html": self.html,
            "css": self.css,
            "canvasWidth": self.canvas_width,
            "canvasHeight": self.canvas_height,
            "styleVariables": self.style_variables,
            "diagnostics": [error.to_dict() for error in self.diagnostics],
        }


@dataclass
class _SlideParts:
    css: str
    html: str
    style_variables: Dict[str, str]
    diagnostics: List[ModuleCompositionError]


def merge_module_data(slide: Slide, shared_data: Optional[Dict[str, dict]]) -> Dict[str, dict]:
    """Shared data as defaults, slide-local data on top. Slide-local always wins."""
    shared_data = shared_data or {}
    merged = {}
    for module_id in set(shared_data) | set(slide.data):
        merged[module_id] = deep_merge(shared_data.get(module_id) or {}, slide.data.get(module_id) or {})
    return merged


def _label(definition: ModuleDefinition, instance_id: str) -> str:
    return definition.name if instance_id == definition.id else f"{definition.name} ({instance_id})"


class _SlideComposer:
    def __init__(
        self,
        registry: ModuleRegistry,
        slide: Slide,
        module_data: Dict[str, dict],
        context: RenderContext,
        config: Optional[CompositionConfig],
    ):
        self.registry = registry
        self.slide = slide
        self.module_data = module_data
        self.context = context
        self.config = config
        self.diagnostics: List[ModuleCompositionError] = []
        self._parsed = {}

    def _fail(self, instance_id: str, phase: str, error: Exception) -> None:
        logger.error(f"Module '{instance_id}' failed during {phase} on slide {self.slide.id}: {error}")
        self.diagnostics.append(ModuleCompositionError(instance_id, phase, error))

    def resolved(self) -> List[Tuple[str, ModuleDefinition]]:
        resolved = []
        for instance_id in self.slide.enabled_modules:
            definition = self.registry.get(instance_id)
            if definition is None:
                logger.warning(f"Skipping unknown module '{instance_id}' on slide {self.slide.id}")
                continue
            resolved.append((instance_id, definition))
        return resolved

    def data_for(self, instance_id: str, definition: ModuleDefinition):
        if instance_id not in self._parsed:
            try:
                self._parsed[instance_id] = definition.parse(self.module_data.get(instance_id))
            except Exception as e:
                self._fail(instance_id, "data", e)
                self._parsed[instance_id] = None
        return self._parsed[instance_id]

    def collect_css(self, modules: List[Tuple[str, ModuleDefinition]]) -> str:
        overrides = self.config.z_index_overrides if self.config else {}
        ordered = sorted(
            enumerate(modules),
            key=lambda item: (self.registry.registration_index(item[1][0]), item[0]),
        )
        fragments = []
        for _, (instance_id, definition) in ordered:
            data = self.data_for(instance_id, definition)
            if data is None:
                continue
            try:
                css = definition.css(data, self.context)
            except Exception as e:
                self._fail(instance_id, "css", e)
                continue
            if not css:
                continue
            if instance_id in overrides:
                css = _Z_INDEX_RE.sub(f"z-index: {int(overrides[instance_id])}", css)
            fragments.append(f"/* === {_label(definition, instance_id)} === */\n{css}")
        return "\n\n".join(fragments)

    def render_html(self, instance_id: str, definition: ModuleDefinition) -> str:
        data = self.data_for(instance_id, definition)
        if data is None:
            return ""
        try:
            html = definition.html(data, self.context)
        except Exception as e:
            self._fail(instance_id, "html", e)
            return ""
        return f"<!-- {_label(definition, instance_id)} -->\n{html}" if html else ""

    def _card_active(self, card: Optional[Tuple[str, ModuleDefinition]]) -> bool:
        if card is None:
            return False
        data = self.data_for(*card)
        return data is not None and getattr(data, "enabled", True)

    def _content_order(self, content: List[Tuple[str, ModuleDefinition]]) -> List[Tuple[str, ModuleDefinition]]:
        if not self.config or not self.config.render_order:
            return content
        by_id = dict(content)
        ordered = []
        for entry in self.config.render_order:
            if entry.module_id in by_id:
                ordered.append((entry.module_id, by_id.pop(entry.module_id)))
        ordered.extend((instance_id, definition) for instance_id, definition in content if instance_id in by_id)
        return ordered

    def collect_html(self, modules: List[Tuple[str, ModuleDefinition]]) -> str:
        background, content, overlay = [], [], []
        card = None
        for instance_id, definition in modules:
            if definition.id == "card":
                card = (instance_id, definition)
            elif definition.category == "layout":
                background.append((instance_id, definition))
            elif definition.category == "content":
                content.append((instance_id, definition))
            else:
                overlay.append((instance_id, definition))

        content = self._content_order(content)
        parts = [self.render_html(*module) for module in background]

        if self._card_active(card):
            parts.append(f"<!-- {card[1].name} -->")
            parts.append('<div class="card-container">')
            parts.extend(self.render_html(*module) for module in content)
            parts.append("</div>")
        elif content:
            parts.append("<!-- Content Wrapper (no card) -->")
            parts.append('<div class="content-wrapper">')
            parts.extend(self.render_html(*module) for module in content)
            parts.append("</div>")

        parts.extend(self.render_html(*module) for module in overlay)
        return "\n\n".join(part for part in parts if part)

    def collect_style_variables(self, modules: List[Tuple[str, ModuleDefinition]]) -> Dict[str, str]:
        variables = {}
        for instance_id, definition in modules:
            data = self.data_for(instance_id, definition)
            if data is None:
                continue
            try:
                variables.update(definition.style_variables(data))
            except Exception as e:
                self._fail(instance_id, "styleVariables", e)
        return variables

    def compose(self) -> _SlideParts:
        modules = self.resolved()
        order = self.registry.sort_by_stack_order(instance_id for instance_id, _ in modules)
        stacked = [(instance_id, self.registry.get(instance_id)) for instance_id in order]
        css = self.collect_css(modules)
        html = self.collect_html(stacked)
        variables = self.collect_style_variables(stacked)
        return _SlideParts(css=css, html=html, style_variables=variables, diagnostics=self.diagnostics)


def _variables_block(variables: Dict[str, str]) -> str:
    return "\n      ".join(f"--{key}: {value};" for key, value in variables.items())


def _document(width: int, height: int, css: str, body: str, variables: str, title: str) -> str:
    return f"""<!DOCTYPE html>
<html lang="pt-br">
<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width={width}, height={height}">
  <title>{title}</title>
  <style>
    :root {{
      {variables}
    }}

    body {{
      width: {width}px;
      height: {height}px;
      margin: 0;
      padding: 0;
      overflow: hidden;
      position: relative;
      display: flex;
      flex-direction: column;
    }}

    .content-wrapper {{
      flex: 1;
      display: flex;
      width: 100%;
      min-height: 0;
      position: relative;
      box-sizing: border-box;
    }}

    {css}
  </style>
</head>
<body>
  {body}

  <script>
    document.fonts.ready.then(function() {{
      document.body.classList.add('fonts-loaded');
    }});
  </script>
</body>
</html>"""


def compose(
    slides: Union[Slide, Sequence[Slide]],
    shared_data: Optional[Dict[str, dict]] = None,
    options: Optional[ComposeOptions] = None,
) -> ComposedDocument:
    """Compose one slide, or several side by side, into a renderable document.

    Module failures never abort composition; they are returned in
    ``diagnostics`` and the failing module contributes nothing.
    """
    options = options or ComposeOptions()
    registry = options.registry or get_registry()
    if isinstance(slides, Slide):
        slides = [slides]
    slides = list(slides)
    geometry = layout(len(slides))
    if options.composition_config is not None:
        options.composition_config.check(registry)

    parts = []
    for index, slide in enumerate(slides):
        module_data = merge_module_data(slide, shared_data)
        context = RenderContext(
            base_url=options.base_url,
            enabled_modules=tuple(slide.enabled_modules),
            slide_index=index,
            viewport_width=geometry.unit_width,
            viewport_height=geometry.unit_height,
            all_modules_data=module_data,
        )
        parts.append(_SlideComposer(registry, slide, module_data, context, options.composition_config).compose())

    diagnostics = [error for part in parts for error in part.diagnostics]

    if not geometry.is_carousel:
        part = parts[0]
        html = _document(
            geometry.canvas_width,
            geometry.canvas_height,
            part.css,
            part.html,
            _variables_block(part.style_variables),
            "Generated Image",
        )
        return ComposedDocument(
            html=html,
            css=part.css,
            canvas_width=geometry.canvas_width,
            canvas_height=geometry.canvas_height,
            style_variables=part.style_variables,
            geometry=geometry,
            diagnostics=diagnostics,
        )

    free_image = validate_free_image_config(options.free_image, geometry.slide_count)
    scoped = [carousel_css(geometry, free_image)]
    variables = {}
    for index, part in enumerate(parts):
        scope = f".carousel-slide-{index + 1}"
        if part.style_variables:
            scoped.append(f"{scope} {{\n  {_variables_block(part.style_variables)}\n}}")
        if part.css:
            scoped.append(f"/* === Slide {index + 1} === */\n{scope_css(part.css, scope)}")
        for key, value in part.style_variables.items():
            variables.setdefault(key, value)
    css = "\n\n".join(scoped)
    body = wrap_in_carousel([part.html for part in parts], free_image, options.base_url)
    html = _document(
        geometry.canvas_width,
        geometry.canvas_height,
        css,
        body,
        _variables_block(variables),
        "Generated Carousel",
    )
    return ComposedDocument(
        html=html,
        css=css,
        canvas_width=geometry.canvas_width,
        canvas_height=geometry.canvas_height,
        style_variables=variables,
        geometry=geometry,
        diagnostics=diagnostics,
    )
