"""
Database configuration for generated-image metadata.

Persistence is optional: with no DATABASE_URL every helper is a no-op.
"""

import asyncio
import logging
from typing import List, Optional

from sqlalchemy import desc, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from slidegen.config import get_settings

logger = logging.getLogger(__name__)

_engine = None
_session_maker = None
_initialized = False


class Base(DeclarativeBase):
    pass


def get_engine():
    global _engine
    database_url = get_settings().database_url
    if _engine is None and database_url:
        _engine = create_async_engine(
            database_url,
            pool_pre_ping=True,
            pool_size=3,
            max_overflow=5,
        )
        logger.info(f"Database engine created for: {database_url[:50]}...")
    return _engine


def get_session_maker():
    global _session_maker
    if _session_maker is None:
        engine = get_engine()
        if engine:
            _session_maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    return _session_maker


async def init_db() -> bool:
    """Create tables. Returns False when persistence is disabled or unreachable."""
    global _initialized
    if _initialized:
        return True

    engine = get_engine()
    if not engine:
        logger.info("No database configured, image metadata will not be recorded")
        return False

    # registers the tables on Base.metadata
    from slidegen import models  # noqa: F401

    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
    except (SQLAlchemyError, OSError, asyncio.TimeoutError) as e:
        logger.error(f"Database init failed: {e}")
        return False
    _initialized = True
    logger.info("Database tables created")
    return True


async def dispose_db() -> None:
    global _engine, _session_maker, _initialized
    if _engine is not None:
        await _engine.dispose()
    _engine = None
    _session_maker = None
    _initialized = False


async def record_generated_image(
    filename: str,
    url: str,
    source: str,
    template: Optional[str] = None,
    slide_number: Optional[int] = None,
    width: Optional[int] = None,
    height: Optional[int] = None,
    metadata: Optional[dict] = None,
) -> bool:
    """Best effort: a failed insert is logged and never reaches the caller."""
    if not await init_db():
        return False
    from slidegen.models import GeneratedImage

    session_maker = get_session_maker()
    try:
        async with session_maker() as session:
            session.add(
                GeneratedImage(
                    filename=filename,
                    url=url,
                    source=source,
                    template=template,
                    slide_number=slide_number,
                    width=width,
                    height=height,
                    metadata_json=metadata,
                )
            )
            await session.commit()
    except (SQLAlchemyError, OSError, asyncio.TimeoutError) as e:
        logger.warning(f"Could not record {filename}: {e}")
        return False
    return True


async def list_generated_images(limit: int = 50, offset: int = 0) -> List[dict]:
    if not await init_db():
        return []
    from slidegen.models import GeneratedImage

    session_maker = get_session_maker()
    try:
        async with session_maker() as session:
            result = await session.execute(
                select(GeneratedImage).order_by(desc(GeneratedImage.created_at)).limit(limit).offset(offset)
            )
            images = result.scalars().all()
    except (SQLAlchemyError, OSError, asyncio.TimeoutError) as e:
        logger.error(f"Database error listing images: {e}")
        return []
    return [image.to_dict() for image in images]
