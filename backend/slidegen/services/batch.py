"""
Batch orchestrator: renders a list of flat template layouts one image each.

Every job is isolated. A failing layout produces ``{"success": False}`` in
its slot and the remaining jobs still run. Results always follow input order.
"""

import asyncio
import logging
import time
from pathlib import Path
from typing import Awaitable, Callable, List, Optional

from slidegen.compositer import ComposeOptions, compose
from slidegen.config import Settings, get_settings
from slidegen.errors import BatchDeadlineError, ValidationError
from slidegen.services.template_builder import build_slide, template_kind

logger = logging.getLogger(__name__)

Recorder = Callable[..., Awaitable[bool]]


async def write_output(settings: Settings, filename: str, data) -> str:
    """Write bytes or text under ``output_dir`` and return the public url."""
    output_dir = Path(settings.output_dir).resolve()
    output_dir.mkdir(parents=True, exist_ok=True)
    path = (output_dir / filename).resolve()
    if path.parent != output_dir:
        raise ValidationError(f"Output path escapes the output directory: {filename}", field_path="filename")
    if isinstance(data, str):
        await asyncio.to_thread(path.write_text, data, encoding="utf-8")
    else:
        await asyncio.to_thread(path.write_bytes, data)
    return f"{settings.output_url_prefix.rstrip('/')}/{filename}"


def summarize(results: List[dict], started: float) -> dict:
    successful = sum(1 for result in results if result["success"])
    return {
        "total": len(results),
        "successful": successful,
        "failed": len(results) - successful,
        "durationMs": int((time.monotonic() - started) * 1000),
    }


class BatchOrchestrator:
    def __init__(self, engine, settings: Optional[Settings] = None, recorder: Optional[Recorder] = None):
        self.engine = engine
        self.settings = settings or get_settings()
        self.recorder = recorder

    async def _render_job(self, index: int, layout: dict, timestamp: int) -> dict:
        slide = build_slide(layout, slide_id=f"batch-{index + 1}")
        document = compose(slide, options=ComposeOptions(base_url=self.settings.base_url))
        for diagnostic in document.diagnostics:
            logger.warning(f"Job #{index + 1}: {diagnostic}")
        image = await self.engine.render_single(
            document.html, document.canvas_width, document.canvas_height, job_index=index
        )
        filename = f"batch-{timestamp}-{index + 1}.png"
        url = await write_output(self.settings, filename, image)
        if self.recorder is not None:
            await self.recorder(
                filename=filename,
                url=url,
                source="batch",
                template=template_kind(layout),
                slide_number=index + 1,
                width=document.canvas_width,
                height=document.canvas_height,
            )
        return {"success": True, "filename": filename, "url": url, "slideNumber": index + 1}

    async def _run_job(self, index: int, layout, timestamp: int, deadline: Optional[float]) -> dict:
        loop = asyncio.get_running_loop()
        try:
            if not isinstance(layout, dict):
                raise TypeError(f"Layout must be an object, got {type(layout).__name__}")
            if deadline is None:
                result = await self._render_job(index, layout, timestamp)
            else:
                remaining = deadline - loop.time()
                if remaining <= 0:
                    raise BatchDeadlineError(index)
                try:
                    result = await asyncio.wait_for(self._render_job(index, layout, timestamp), remaining)
                except asyncio.TimeoutError as e:
                    raise BatchDeadlineError(index) from e
        except Exception as e:
            logger.error(f"Slide {index + 1} failed: {e}")
            return {"success": False, "error": str(e), "slideNumber": index + 1}
        logger.info(f"Slide {index + 1} rendered: {result['filename']}")
        return result

    async def run_batch(self, layouts: List[dict], deadline_seconds: Optional[float] = None) -> dict:
        """Render every layout. Returns ``{"results": [...], "summary": {...}}``."""
        started = time.monotonic()
        timestamp = int(time.time() * 1000)
        if deadline_seconds is None:
            deadline_seconds = self.settings.batch_deadline_seconds
        loop = asyncio.get_running_loop()
        deadline = loop.time() + deadline_seconds if deadline_seconds else None
        semaphore = asyncio.Semaphore(max(1, self.settings.batch_concurrency))

        async def run(index: int, layout) -> dict:
            async with semaphore:
                return await self._run_job(index, layout, timestamp, deadline)

        logger.info(f"Batch started: {len(layouts)} layouts")
        results = await asyncio.gather(*(run(index, layout) for index, layout in enumerate(layouts)))
        summary = summarize(results, started)
        logger.info(
            f"Batch complete: {summary['successful']}/{summary['total']} succeeded in {summary['durationMs']}ms"
        )
        return {"results": list(results), "summary": summary}
