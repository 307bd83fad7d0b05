"""
API routes for the slide composer and renderer.
"""

import logging
import re
import time
from typing import Any, Dict, List, Literal, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query, Request
from fastapi.responses import JSONResponse
from pydantic import AliasChoices, Field

from slidegen.compositer import ComposeOptions, CompositionConfig, compose
from slidegen.config import Settings, get_settings
from slidegen.database import list_generated_images, record_generated_image
from slidegen.errors import SlidegenError, ValidationError
from slidegen.layout_bases import list_layout_bases
from slidegen.modules.registry import get_registry
from slidegen.modules.types import CamelModel, Slide
from slidegen.presets import get_preset, list_presets, preset_slide
from slidegen.services.batch import BatchOrchestrator, write_output
from slidegen.services.render_engine import RenderEngine
from slidegen.services.template_builder import list_template_kinds
from slidegen.services.transformer import process_carousel_data

logger = logging.getLogger(__name__)

router = APIRouter()


# Dependencies

def get_render_engine(request: Request) -> RenderEngine:
    """The app-wide engine, created on first use and closed on shutdown."""
    engine = getattr(request.app.state, "render_engine", None)
    if engine is None:
        engine = RenderEngine(get_settings())
        request.app.state.render_engine = engine
    return engine


def get_recorder():
    return record_generated_image


# Request Models

class SlidePayload(CamelModel):
    id: str = ""
    enabled_modules: List[str] = Field(default_factory=list)
    data: Dict[str, dict] = Field(default_factory=dict)


class ComposeRequest(CamelModel):
    slides: Optional[List[SlidePayload]] = None
    shared_module_data: Dict[str, dict] = Field(default_factory=dict)
    free_image: Optional[Dict[str, Any]] = Field(
        default=None,
        validation_alias=AliasChoices("freeImage", "freeOverlay", "free_image"),
    )
    composition_config: Optional[CompositionConfig] = None

    # legacy single-slide payload
    enabled_modules: Optional[List[str]] = None
    module_data: Dict[str, dict] = Field(default_factory=dict)
    preset_id: Optional[str] = None


class GenerateRequest(ComposeRequest):
    format: Literal["png", "jpeg", "webp"] = "png"
    quality: Optional[int] = Field(default=None, ge=1, le=100)
    filename: Optional[str] = None


def _request_slides(body: ComposeRequest) -> List[Slide]:
    if body.slides:
        return [
            Slide(id=slide.id or f"slide-{index + 1}", enabled_modules=slide.enabled_modules, data=slide.data)
            for index, slide in enumerate(body.slides)
        ]
    if body.preset_id:
        if get_preset(body.preset_id) is None:
            raise ValidationError(f"Unknown preset: {body.preset_id}", field_path="presetId")
        slide = preset_slide(body.preset_id, module_data=body.module_data)
        if body.enabled_modules:
            slide.enabled_modules = list(body.enabled_modules)
        return [slide]
    if body.enabled_modules:
        return [Slide(id="slide-1", enabled_modules=list(body.enabled_modules), data=dict(body.module_data))]
    raise ValidationError("Either slides or enabledModules is required", field_path="slides")


def _compose(body: ComposeRequest, settings: Settings):
    slides = _request_slides(body)
    options = ComposeOptions(
        base_url=settings.base_url,
        composition_config=body.composition_config,
        free_image=body.free_image,
    )
    return compose(slides, shared_data=body.shared_module_data, options=options)


def _output_stem(filename: Optional[str]) -> Optional[str]:
    """Caller-chosen base name with any extension dropped. Paths are rejected."""
    if not filename:
        return None
    if "/" in filename or "\\" in filename:
        raise ValidationError("filename must not contain path separators", field_path="filename")
    stem = re.sub(r"\.[^.]+$", "", filename).strip()
    if not stem or stem.startswith("."):
        raise ValidationError(f"Invalid filename: {filename}", field_path="filename")
    return stem


def _bad_request(error: ValidationError) -> JSONResponse:
    return JSONResponse(status_code=400, content={"success": False, **error.to_dict()})


# Catalogue

@router.get("/modules")
async def list_modules():
    return get_registry().describe()


@router.get("/presets")
async def get_presets():
    return list_presets()


@router.get("/layouts")
async def get_layouts():
    return {"layouts": list_layout_bases(), "templates": list_template_kinds()}


# Compose / render

@router.post("/compose")
async def compose_document(body: ComposeRequest, settings: Settings = Depends(get_settings)):
    """Compose only, no rendering. Useful for previews."""
    try:
        document = _compose(body, settings)
    except ValidationError as e:
        return _bad_request(e)
    return document.to_dict()


@router.post("/generate")
async def generate(
    body: GenerateRequest,
    settings: Settings = Depends(get_settings),
    engine: RenderEngine = Depends(get_render_engine),
    recorder=Depends(get_recorder),
):
    """Compose and render one slide, or a carousel when two or more slides are given."""
    started = time.monotonic()
    try:
        stem = _output_stem(body.filename)
        document = _compose(body, settings)
    except ValidationError as e:
        return _bad_request(e)

    timestamp = int(time.time() * 1000)
    try:
        if document.slide_count > 1:
            images = await engine.render_carousel(
                document.html,
                document.canvas_width,
                document.canvas_height,
                document.clip_rects,
                image_format=body.format,
                quality=body.quality,
            )
            prefix = stem or "carousel"
            filenames = [f"{prefix}-{timestamp}-{index + 1}.{body.format}" for index in range(len(images))]
        else:
            images = [
                await engine.render_single(
                    document.html,
                    document.canvas_width,
                    document.canvas_height,
                    image_format=body.format,
                    quality=body.quality,
                )
            ]
            filenames = [f"{stem}.{body.format}" if stem else f"modular-{timestamp}.{body.format}"]
    except SlidegenError as e:
        logger.error(f"Render failed: {e}")
        raise HTTPException(status_code=500, detail=str(e))

    urls = []
    for index, (filename, image) in enumerate(zip(filenames, images)):
        url = await write_output(settings, filename, image)
        urls.append(url)
        if recorder is not None:
            await recorder(
                filename=filename,
                url=url,
                source="generate",
                template=body.preset_id,
                slide_number=index + 1,
                width=document.geometry.unit_width,
                height=document.geometry.unit_height,
            )

    html_url = None
    if settings.save_debug_html:
        html_url = await write_output(settings, f"debug-{timestamp}.html", document.html)

    duration_ms = int((time.monotonic() - started) * 1000)
    logger.info(f"Generated {len(urls)} image(s) in {duration_ms}ms")
    return {
        "success": True,
        "images": urls,
        "filenames": filenames,
        "htmlUrl": html_url,
        "durationMs": duration_ms,
        "diagnostics": [error.to_dict() for error in document.diagnostics],
    }


@router.post("/generate-batch")
async def generate_batch(
    body: Dict[str, Any] = Body(...),
    settings: Settings = Depends(get_settings),
    engine: RenderEngine = Depends(get_render_engine),
    recorder=Depends(get_recorder),
):
    layouts = body.get("layouts")
    if not isinstance(layouts, list) or not layouts:
        raise HTTPException(status_code=400, detail="layouts must be a non-empty array")

    orchestrator = BatchOrchestrator(engine, settings, recorder=recorder)
    outcome = await orchestrator.run_batch(layouts)
    return {"success": True, **outcome}


@router.post("/transform-carousel")
async def transform_carousel(body: Dict[str, Any] = Body(...), settings: Settings = Depends(get_settings)):
    """Turn externally generated carousel JSON into batch-ready layouts."""
    highlight_color = body.get("highlightColor") or settings.highlight_color
    highlight_color_secondary = body.get("highlightColorSecondary") or settings.highlight_color_secondary
    try:
        layouts = process_carousel_data(
            body,
            highlight_color=highlight_color,
            highlight_color_secondary=highlight_color_secondary,
            card_gradient=body.get("cardGradient"),
        )
    except ValidationError as e:
        logger.error(f"Carousel validation failed: {e.message}")
        return JSONResponse(
            status_code=400,
            content={"success": False, "error": e.message, "details": e.issues},
        )
    logger.info(f"Transformed {len(layouts)} layouts")
    return {
        "success": True,
        "layouts": layouts,
        "count": len(layouts),
        "highlightColor": highlight_color,
        "highlightColorSecondary": highlight_color_secondary,
    }


@router.get("/images")
async def list_images(
    limit: int = Query(default=50, ge=1, le=200),
    offset: int = Query(default=0, ge=0),
):
    """Recently generated images (empty when persistence is disabled)."""
    return await list_generated_images(limit=limit, offset=offset)
