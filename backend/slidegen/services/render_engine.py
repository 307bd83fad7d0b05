"""
Render & capture engine.

Owns one long-lived headless Chromium handle (Playwright, async API), created
lazily and reused across jobs. Each job gets its own page which is closed on
every exit path. After ``render_max_consecutive_timeouts`` page-load timeouts
in a row the browser is force-recreated so one hung document cannot poison
the shared handle.
"""

import asyncio
import io
import logging
from contextlib import asynccontextmanager
from typing import List, Optional, Sequence

from PIL import Image
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError
from playwright.async_api import async_playwright

from slidegen.config import Settings, get_settings
from slidegen.errors import CaptureError, RenderTimeoutError
from slidegen.layout import ClipRect

logger = logging.getLogger(__name__)

IMAGE_FORMATS = ("png", "jpeg", "webp")


class ChromiumLauncher:
    """Starts Playwright on first use and launches headless Chromium."""

    def __init__(self):
        self._playwright = None

    async def launch(self, args: Sequence[str]):
        if self._playwright is None:
            self._playwright = await async_playwright().start()
        return await self._playwright.chromium.launch(headless=True, args=list(args))

    async def stop(self) -> None:
        if self._playwright is not None:
            await self._playwright.stop()
            self._playwright = None


def encode_webp(png_bytes: bytes, quality: int = 90) -> bytes:
    with Image.open(io.BytesIO(png_bytes)) as image:
        buffer = io.BytesIO()
        image.save(buffer, format="WEBP", quality=quality)
        return buffer.getvalue()


def _job_label(job_index: Optional[int]) -> str:
    return "" if job_index is None else f" (job #{job_index + 1})"


class RenderEngine:
    def __init__(self, settings: Optional[Settings] = None, launcher=None):
        self.settings = settings or get_settings()
        self.launcher = launcher or ChromiumLauncher()
        self._browser = None
        self._lock = asyncio.Lock()
        self.consecutive_timeouts = 0
        self.launch_count = 0

    async def _get_browser(self):
        async with self._lock:
            if self._browser is not None and not self._browser.is_connected():
                logger.warning("Browser disconnected, relaunching")
                self._browser = None
            if self._browser is None:
                self._browser = await self.launcher.launch(self.settings.browser_args)
                self.launch_count += 1
                logger.info(f"Browser launched (launch #{self.launch_count})")
            return self._browser

    async def _discard_browser(self) -> None:
        async with self._lock:
            browser, self._browser = self._browser, None
        if browser is None:
            return
        try:
            await browser.close()
        except PlaywrightError as e:
            logger.warning(f"Error closing browser: {e}")

    async def close(self) -> None:
        await self._discard_browser()
        await self.launcher.stop()
        logger.info("Render engine closed")

    @asynccontextmanager
    async def _page(self, width: int, height: int):
        browser = await self._get_browser()
        page = await browser.new_page(
            viewport={"width": width, "height": height},
            device_scale_factor=self.settings.render_device_scale_factor,
        )
        try:
            yield page
        finally:
            try:
                await page.close()
            except PlaywrightError as e:
                logger.warning(f"Error closing page: {e}")

    async def _on_timeout(self) -> None:
        self.consecutive_timeouts += 1
        limit = self.settings.render_max_consecutive_timeouts
        if limit and self.consecutive_timeouts >= limit:
            logger.error(f"{self.consecutive_timeouts} consecutive render timeouts, recreating browser")
            self.consecutive_timeouts = 0
            await self._discard_browser()

    async def _load(self, page, html: str, job_index: Optional[int]) -> None:
        """Load the document and wait until it is ready to capture."""
        timeout = self.settings.render_page_timeout_ms
        try:
            await page.set_content(html, wait_until="networkidle", timeout=timeout)
            await page.evaluate("() => document.fonts.ready.then(() => true)")
        except PlaywrightTimeoutError as e:
            await self._on_timeout()
            raise RenderTimeoutError(f"Document did not load within {timeout}ms{_job_label(job_index)}", job_index) from e
        except PlaywrightError as e:
            raise CaptureError(f"Document failed to load{_job_label(job_index)}: {e}", job_index) from e
        self.consecutive_timeouts = 0
        # late-painting svg and background images
        await asyncio.sleep(self.settings.render_grace_delay_ms / 1000)

    async def _capture(self, page, image_format: str, quality: Optional[int], clip: Optional[ClipRect], job_index):
        options = {"type": "jpeg" if image_format == "jpeg" else "png"}
        if image_format == "jpeg" and quality:
            options["quality"] = quality
        if clip is not None:
            options["clip"] = clip.to_dict()
        try:
            data = await page.screenshot(**options)
        except PlaywrightError as e:
            raise CaptureError(f"Screenshot failed{_job_label(job_index)}: {e}", job_index) from e
        if image_format == "webp":
            data = await asyncio.to_thread(encode_webp, data, quality or 90)
        return data

    async def render_single(
        self,
        html: str,
        width: int,
        height: int,
        image_format: str = "png",
        quality: Optional[int] = None,
        job_index: Optional[int] = None,
    ) -> bytes:
        """Capture the full viewport of one document."""
        if image_format not in IMAGE_FORMATS:
            raise CaptureError(f"Unsupported image format: {image_format}", job_index)
        async with self._page(width, height) as page:
            await self._load(page, html, job_index)
            return await self._capture(page, image_format, quality, None, job_index)

    async def render_carousel(
        self,
        html: str,
        canvas_width: int,
        canvas_height: int,
        clip_rects: List[ClipRect],
        image_format: str = "png",
        quality: Optional[int] = None,
        job_index: Optional[int] = None,
    ) -> List[bytes]:
        """Load the canvas once, then capture one image per clip rectangle."""
        if image_format not in IMAGE_FORMATS:
            raise CaptureError(f"Unsupported image format: {image_format}", job_index)
        async with self._page(canvas_width, canvas_height) as page:
            await self._load(page, html, job_index)
            images = []
            for clip in clip_rects:
                images.append(await self._capture(page, image_format, quality, clip, job_index))
            logger.info(f"Captured {len(images)} carousel slides")
            return images
