"""FastAPI app: API routes plus the generated images as static files."""
import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from slidegen.config import get_settings
from slidegen.database import dispose_db, init_db
from slidegen.modules.registry import get_registry
from slidegen.routes import router

settings = get_settings()

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Check the module registry and database on startup, close the browser on shutdown."""
    logger.info("Starting app...")
    registry = get_registry()
    logger.info(f"Module registry ready: {len(registry)} modules")
    await init_db()

    yield

    logger.info("Shutting down...")
    engine = getattr(app.state, "render_engine", None)
    if engine is not None:
        await engine.close()
    await dispose_db()


app = FastAPI(title="Slidegen", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
def health():
    return {"status": "ok"}


app.include_router(router, prefix="/api")

Path(settings.output_dir).mkdir(parents=True, exist_ok=True)
app.mount(settings.output_url_prefix, StaticFiles(directory=settings.output_dir), name="images")
