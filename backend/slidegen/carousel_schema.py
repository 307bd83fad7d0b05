"""
Schemas for externally generated carousel JSON.

Three historical shapes are accepted:

* inline highlights: ``carousel.copy.slides[].destaques`` holds plain string lists
* separated highlights: ``carousel.destaques[]`` keyed by slide ``numero``
* legacy container: ``carrossel.slides[]`` (inline string lists)

``validate_carousel_data`` detects the shape and normalizes it into a
``CanonicalCarousel`` where every slide carries its own highlight chunks.
"""

import logging
from typing import Dict, List, Literal, Optional
from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, Field, PositiveInt, field_validator
from pydantic import ValidationError as PydanticValidationError

from slidegen.errors import ValidationError
from slidegen.layout_bases import base_estilo

logger = logging.getLogger(__name__)

VALID_ESTILOS = (
    "stack-img",
    "stack-img-bg",
    "stack-img reverse",
    "stack-img-bg reverse",
    "ff_stack1",
    "ff_stack1-b",
    "ff_stack2",
    "ff_stack2-b",
    "ff_capa",
)

TEXT_KEYS = ("texto_1", "texto_2", "texto_3", "texto_4", "texto_5")

HighlightKind = Literal["bold", "italic", "bold+italic", "bg4", "bg4 primary", "bg4 secondary"]


class _Model(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class DestaqueChunk(_Model):
    trecho: str
    tipo: HighlightKind
    cor: bool


class DestaquesOld(_Model):
    texto_1: Optional[List[str]] = None
    texto_2: Optional[List[str]] = None
    texto_3: Optional[List[str]] = None
    texto_4: Optional[List[str]] = None
    texto_5: Optional[List[str]] = None
    titulo: Optional[List[str]] = None


class DestaquesNew(_Model):
    texto_1: Optional[List[DestaqueChunk]] = None
    texto_2: Optional[List[DestaqueChunk]] = None
    texto_3: Optional[List[DestaqueChunk]] = None
    texto_4: Optional[List[DestaqueChunk]] = None
    texto_5: Optional[List[DestaqueChunk]] = None
    titulo: Optional[List[DestaqueChunk]] = None

    def for_field(self, key: str) -> List[DestaqueChunk]:
        return getattr(self, key, None) or []


class LineStyle(_Model):
    color: Optional[str] = None
    background_color: Optional[str] = Field(default=None, alias="backgroundColor")
    bold: Optional[bool] = None
    italic: Optional[bool] = None
    font_weight: Optional[str] = Field(default=None, alias="fontWeight")
    padding: Optional[str] = None
    font_family: Optional[str] = Field(default=None, alias="fontFamily")
    font_size: Optional[str] = Field(default=None, alias="fontSize")
    letter_spacing: Optional[str] = Field(default=None, alias="letterSpacing")
    text_shadow: Optional[str] = Field(default=None, alias="textShadow")


class TitleSpecialStyling(_Model):
    enabled: bool
    line_styles: Optional[List[LineStyle]] = Field(default=None, alias="lineStyles")


class _SlideBase(_Model):
    numero: PositiveInt
    estilo: str
    texto_1: Optional[str] = None
    texto_2: Optional[str] = None
    texto_3: Optional[str] = None
    texto_4: Optional[str] = None
    texto_5: Optional[str] = None
    texto_principal: Optional[Literal["texto_1", "texto_2", "texto_3", "texto_4", "texto_5"]] = None
    titulo: Optional[str] = None
    title_special_styling: Optional[TitleSpecialStyling] = Field(default=None, alias="titleSpecialStyling")

    @field_validator("estilo")
    @classmethod
    def _known_estilo(cls, value: str) -> str:
        if value not in VALID_ESTILOS:
            raise ValueError(f"estilo must be one of: {', '.join(VALID_ESTILOS)}")
        return value


class CarouselSlideOld(_SlideBase):
    destaques: Optional[DestaquesOld] = None


class CarouselSlideNew(_SlideBase):
    pass


class DestaqueItem(_Model):
    numero: PositiveInt
    destaques: Optional[DestaquesNew] = None


class PhotoSource(_Model):
    portrait: Optional[str] = None
    landscape: Optional[str] = None
    original: Optional[str] = None

    @field_validator("portrait", "landscape", "original")
    @classmethod
    def _url(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        parsed = urlparse(value)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError("Invalid url")
        return value


class PhotoDimensions(_Model):
    width: float
    height: float


class Photo(_Model):
    src: PhotoSource
    dim: Optional[PhotoDimensions] = None
    id: Optional[int] = None
    photographer: Optional[str] = None
    alt: Optional[str] = None


class CarouselPhoto(_Model):
    photo: Photo
    slide: PositiveInt


class _CopyOld(_Model):
    slides: List[CarouselSlideOld] = Field(min_length=1)


class _CopyNew(_Model):
    slides: List[CarouselSlideNew] = Field(min_length=1)


class _CarouselOld(_Model):
    photos: Optional[List[CarouselPhoto]] = None
    copy_: _CopyOld = Field(alias="copy")


class _CarouselNew(_Model):
    photos: Optional[List[CarouselPhoto]] = None
    copy_: _CopyNew = Field(alias="copy")
    destaques: Optional[List[DestaqueItem]] = None


class CarouselOldFormat(_Model):
    carousel: _CarouselOld


class CarouselNewFormat(_Model):
    carousel: _CarouselNew


class _Carrossel(_Model):
    slides: List[CarouselSlideOld] = Field(min_length=1)


class LegacyCarousel(_Model):
    carrossel: _Carrossel


# Canonical shape

class CanonicalSlide(_SlideBase):
    """A slide with its highlight chunks attached, whatever the input shape was."""

    destaques: DestaquesNew = Field(default_factory=DestaquesNew)

    @property
    def base_estilo(self) -> str:
        return base_estilo(self.estilo)

    @property
    def is_reverse(self) -> bool:
        return self.estilo.lower().endswith("reverse")

    def text(self, key: str) -> Optional[str]:
        return getattr(self, key, None)


class CanonicalCarousel(_Model):
    slides: List[CanonicalSlide]
    photos: List[CarouselPhoto] = Field(default_factory=list)
    source_format: Literal["inline", "separated", "legacy"] = "separated"

    def photo_for(self, numero: int) -> Optional[PhotoSource]:
        for item in self.photos:
            if item.slide == numero:
                return item.photo.src
        return None


def _slide_fields(slide: _SlideBase) -> dict:
    return slide.model_dump(exclude={"destaques"}, by_alias=False)


def _convert_inline(destaques: Optional[DestaquesOld]) -> DestaquesNew:
    """Inline string lists become bold chunks with the highlight colour applied."""
    converted = {}
    if destaques is not None:
        for key, highlights in destaques.model_dump(exclude_none=True).items():
            if highlights:
                converted[key] = [DestaqueChunk(trecho=trecho, tipo="bold", cor=True) for trecho in highlights]
    return DestaquesNew(**converted)


def _from_inline(slides: List[CarouselSlideOld], photos, source_format: str) -> CanonicalCarousel:
    return CanonicalCarousel(
        slides=[
            CanonicalSlide(**_slide_fields(slide), destaques=_convert_inline(slide.destaques)) for slide in slides
        ],
        photos=photos or [],
        source_format=source_format,
    )


def _from_separated(data: CarouselNewFormat) -> CanonicalCarousel:
    by_number: Dict[int, DestaquesNew] = {}
    for item in data.carousel.destaques or []:
        if item.destaques is not None:
            by_number[item.numero] = item.destaques
    return CanonicalCarousel(
        slides=[
            CanonicalSlide(**_slide_fields(slide), destaques=by_number.get(slide.numero, DestaquesNew()))
            for slide in data.carousel.copy_.slides
        ],
        photos=data.carousel.photos or [],
        source_format="separated",
    )


def _issues(error: PydanticValidationError) -> List[dict]:
    return [
        {
            "path": [part for part in issue["loc"]],
            "message": issue["msg"],
            "code": issue["type"],
        }
        for issue in error.errors()
    ]


def validate_carousel_data(data) -> CanonicalCarousel:
    """Detect the input shape and normalize it.

    Inline highlights win when some slide actually carries them, then the
    separated format, then the legacy container. When nothing matches the
    separated-format errors are raised, being the most informative.
    """
    try:
        old = CarouselOldFormat.model_validate(data)
    except PydanticValidationError:
        old = None
    if old is not None and any(slide.destaques for slide in old.carousel.copy_.slides):
        logger.info("Carousel data matched inline highlight format")
        return _from_inline(old.carousel.copy_.slides, old.carousel.photos, "inline")

    try:
        new = CarouselNewFormat.model_validate(data)
    except PydanticValidationError as e:
        new_error = e
    else:
        logger.info("Carousel data matched separated highlight format")
        return _from_separated(new)

    try:
        legacy = LegacyCarousel.model_validate(data)
    except PydanticValidationError:
        legacy = None
    if legacy is not None:
        logger.info("Carousel data matched legacy 'carrossel' format")
        return _from_inline(legacy.carrossel.slides, [], "legacy")

    logger.warning(f"Carousel data matched no known format ({new_error.error_count()} issues)")
    issues = _issues(new_error)
    field_path = ".".join(str(part) for part in issues[0]["path"]) if issues else ""
    raise ValidationError("Invalid carousel data structure", field_path=field_path, issues=issues)
