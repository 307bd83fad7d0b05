import asyncio

import pytest
from playwright.async_api import Error as PlaywrightError

from slidegen.config import Settings
from slidegen.errors import CaptureError

PNG_BYTES = b"\x89PNG\r\n\x1a\nfake-image"


class FakeEngine:
    """Stands in for RenderEngine. Fails the jobs listed in ``fail_on``."""

    def __init__(self, fail_on=(), delays=None):
        self.fail_on = set(fail_on)
        self.delays = delays or {}
        self.calls = []
        self.closed = False

    async def render_single(self, html, width, height, image_format="png", quality=None, job_index=None):
        self.calls.append({"kind": "single", "job_index": job_index, "width": width, "height": height, "html": html})
        delay = self.delays.get(job_index, 0)
        if delay:
            await asyncio.sleep(delay)
        if job_index in self.fail_on:
            raise CaptureError("forced failure", job_index)
        return PNG_BYTES

    async def render_carousel(
        self, html, canvas_width, canvas_height, clip_rects, image_format="png", quality=None, job_index=None
    ):
        self.calls.append({"kind": "carousel", "width": canvas_width, "clips": list(clip_rects), "html": html})
        return [PNG_BYTES for _ in clip_rects]

    async def close(self):
        self.closed = True


class FakePage:
    def __init__(self, browser):
        self.browser = browser
        self.loads = 0
        self.screenshots = []
        self.closed = False

    async def set_content(self, html, wait_until=None, timeout=None):
        self.loads += 1
        if self.browser.load_error is not None:
            raise self.browser.load_error

    async def evaluate(self, script):
        return True

    async def screenshot(self, **options):
        if self.browser.capture_error:
            raise PlaywrightError("Target closed")
        self.screenshots.append(options)
        return self.browser.image

    async def close(self):
        if self.browser.close_error:
            raise PlaywrightError("Target page, context or browser has been closed")
        self.closed = True


class FakeBrowser:
    def __init__(self, load_error=None, capture_error=False, close_error=False, image=PNG_BYTES):
        self.load_error = load_error
        self.capture_error = capture_error
        self.close_error = close_error
        self.image = image
        self.connected = True
        self.closed = False
        self.pages = []

    def is_connected(self):
        return self.connected

    async def new_page(self, viewport=None, device_scale_factor=None):
        page = FakePage(self)
        page.viewport = viewport
        page.device_scale_factor = device_scale_factor
        self.pages.append(page)
        return page

    async def close(self):
        self.closed = True
        self.connected = False


class FakeLauncher:
    def __init__(self, **browser_options):
        self.browser_options = browser_options
        self.browsers = []
        self.stopped = False

    async def launch(self, args):
        browser = FakeBrowser(**self.browser_options)
        self.browsers.append(browser)
        return browser

    async def stop(self):
        self.stopped = True


@pytest.fixture
def settings(tmp_path):
    return Settings(
        output_dir=str(tmp_path / "images"),
        database_url="",
        render_grace_delay_ms=0,
        render_max_consecutive_timeouts=3,
        save_debug_html=True,
    )


@pytest.fixture
def fake_engine():
    return FakeEngine()


def stack_layout(text="Treino de força muda tudo", **extra):
    layout = {"template": "stack", "text1": text}
    layout.update(extra)
    return layout


def two_slide_carousel():
    return {
        "carousel": {
            "copy": {
                "slides": [
                    {"numero": 1, "estilo": "stack-img", "texto_1": "Treino de força muda tudo"},
                    {"numero": 2, "estilo": "stack-img-bg", "texto_1": "Durma oito horas por noite"},
                ]
            },
            "destaques": [
                {"numero": 1, "destaques": {"texto_1": [{"trecho": "muda tudo", "tipo": "bold", "cor": True}]}},
                {"numero": 2, "destaques": {"texto_1": [{"trecho": "oito horas", "tipo": "bold", "cor": True}]}},
            ],
            "photos": [
                {
                    "photo": {
                        "src": {
                            "portrait": "https://images.example.com/1-portrait.jpg",
                            "landscape": "https://images.example.com/1-landscape.jpg",
                        }
                    },
                    "slide": 1,
                },
                {
                    "photo": {"src": {"landscape": "https://images.example.com/2-landscape.jpg"}},
                    "slide": 2,
                },
            ],
        }
    }
