import io

import pytest
from PIL import Image
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from slidegen.errors import CaptureError, RenderTimeoutError
from slidegen.layout import layout
from slidegen.services.render_engine import RenderEngine

from conftest import FakeLauncher


def _png() -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", (4, 4), (255, 0, 0)).save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.mark.asyncio
async def test_browser_is_launched_once_and_reused(settings):
    launcher = FakeLauncher()
    engine = RenderEngine(settings, launcher=launcher)

    await engine.render_single("<html></html>", 1080, 1440)
    await engine.render_single("<html></html>", 1080, 1440)

    assert len(launcher.browsers) == 1
    pages = launcher.browsers[0].pages
    assert len(pages) == 2
    assert all(page.closed for page in pages)
    assert pages[0].viewport == {"width": 1080, "height": 1440}
    assert pages[0].device_scale_factor == 2


@pytest.mark.asyncio
async def test_disconnected_browser_is_relaunched(settings):
    launcher = FakeLauncher()
    engine = RenderEngine(settings, launcher=launcher)
    await engine.render_single("<html></html>", 100, 100)
    launcher.browsers[0].connected = False

    await engine.render_single("<html></html>", 100, 100)

    assert len(launcher.browsers) == 2


@pytest.mark.asyncio
async def test_carousel_loads_once_and_captures_each_clip(settings):
    launcher = FakeLauncher()
    engine = RenderEngine(settings, launcher=launcher)
    geometry = layout(3)

    images = await engine.render_carousel(
        "<html></html>", geometry.canvas_width, geometry.canvas_height, geometry.slide_clip_rects
    )

    page = launcher.browsers[0].pages[0]
    assert len(images) == 3
    assert page.loads == 1
    assert [shot["clip"]["x"] for shot in page.screenshots] == [0, 1080, 2160]
    assert page.closed


@pytest.mark.asyncio
async def test_capture_failure_closes_page(settings):
    launcher = FakeLauncher(capture_error=True)
    engine = RenderEngine(settings, launcher=launcher)

    with pytest.raises(CaptureError) as exc:
        await engine.render_single("<html></html>", 100, 100, job_index=4)

    assert exc.value.job_index == 4
    assert launcher.browsers[0].pages[0].closed


@pytest.mark.asyncio
async def test_load_failure_becomes_capture_error_with_job_index(settings):
    launcher = FakeLauncher(load_error=PlaywrightError("net::ERR_ABORTED; Target crashed"))
    engine = RenderEngine(settings, launcher=launcher)

    with pytest.raises(CaptureError) as exc:
        await engine.render_single("<html></html>", 100, 100, job_index=4)

    assert exc.value.job_index == 4
    assert "Target crashed" in str(exc.value)
    assert launcher.browsers[0].pages[0].closed
    assert engine.consecutive_timeouts == 0


@pytest.mark.asyncio
async def test_page_close_failure_keeps_the_original_error(settings):
    launcher = FakeLauncher(capture_error=True, close_error=True)
    engine = RenderEngine(settings, launcher=launcher)

    with pytest.raises(CaptureError) as exc:
        await engine.render_single("<html></html>", 100, 100, job_index=1)

    assert exc.value.job_index == 1


@pytest.mark.asyncio
async def test_timeouts_trip_the_watchdog(settings):
    launcher = FakeLauncher(load_error=PlaywrightTimeoutError("Timeout 30000ms exceeded"))
    engine = RenderEngine(settings, launcher=launcher)

    for attempt in range(3):
        with pytest.raises(RenderTimeoutError) as exc:
            await engine.render_single("<html></html>", 100, 100, job_index=attempt)
        assert exc.value.job_index == attempt

    first = launcher.browsers[0]
    assert first.closed
    assert all(page.closed for page in first.pages)

    launcher.browser_options = {}
    await engine.render_single("<html></html>", 100, 100)
    assert len(launcher.browsers) == 2
    assert engine.consecutive_timeouts == 0


@pytest.mark.asyncio
async def test_jpeg_quality_and_webp_encoding(settings):
    launcher = FakeLauncher(image=_png())
    engine = RenderEngine(settings, launcher=launcher)

    await engine.render_single("<html></html>", 4, 4, image_format="jpeg", quality=70)
    shot = launcher.browsers[0].pages[0].screenshots[0]
    assert shot == {"type": "jpeg", "quality": 70}

    webp = await engine.render_single("<html></html>", 4, 4, image_format="webp")
    assert webp[:4] == b"RIFF"
    assert webp[8:12] == b"WEBP"


@pytest.mark.asyncio
async def test_unsupported_format(settings):
    engine = RenderEngine(settings, launcher=FakeLauncher())
    with pytest.raises(CaptureError):
        await engine.render_single("<html></html>", 4, 4, image_format="gif")


@pytest.mark.asyncio
async def test_close_stops_playwright(settings):
    launcher = FakeLauncher()
    engine = RenderEngine(settings, launcher=launcher)
    await engine.render_single("<html></html>", 4, 4)

    await engine.close()

    assert launcher.browsers[0].closed
    assert launcher.stopped
