"""
Core types of the module system: module definitions, render context and
the data schemas shared between modules.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, FrozenSet, List, Literal, Optional, Tuple, Type, Union

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


ModuleCategory = Literal["layout", "content", "overlay"]

SpecialPosition = Literal[
    "none",
    "center",
    "top-left",
    "top-center",
    "top-right",
    "center-left",
    "center-right",
    "bottom-left",
    "bottom-center",
    "bottom-right",
]


class CamelModel(BaseModel):
    """Base for module data. Accepts camelCase or snake_case keys, ignores unknown keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    def to_dict(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


class TextStyle(CamelModel):
    font_family: Optional[str] = None
    font_size: Optional[str] = None
    font_weight: Optional[str] = None
    font_style: Optional[str] = None
    color: Optional[str] = None
    background_color: Optional[str] = None
    text_align: Optional[str] = None
    line_height: Optional[str] = None
    letter_spacing: Optional[str] = None
    text_transform: Optional[str] = None
    text_shadow: Optional[str] = None
    text_decoration: Optional[str] = None
    padding: Optional[str] = None


class StyledChunk(CamelModel):
    """A highlighted substring and the inline styles applied to it."""

    text: str
    color: Optional[str] = None
    font_family: Optional[str] = None
    font_size: Optional[str] = None
    font_weight: Optional[str] = None
    bold: bool = False
    italic: bool = False
    underline: bool = False
    letter_spacing: Optional[str] = None
    line_height: Optional[str] = None
    background_color: Optional[str] = None
    padding: Optional[str] = None
    line_break: bool = False


class Position(CamelModel):
    top: Optional[Union[str, int]] = None
    left: Optional[Union[str, int]] = None
    right: Optional[Union[str, int]] = None
    bottom: Optional[Union[str, int]] = None
    width: Optional[Union[str, int]] = None
    height: Optional[Union[str, int]] = None


class GradientOverlay(CamelModel):
    enabled: bool = False
    color: str = "#000000"
    start_opacity: float = 0.7
    mid_opacity: float = 0.3
    end_opacity: float = 0.0
    height: float = 50
    direction: str = "to top"
    blend_mode: str = "normal"


@dataclass(frozen=True)
class RenderContext:
    """What a module may know about the document it is rendered into."""

    base_url: str
    enabled_modules: Tuple[str, ...]
    slide_index: int = 0
    viewport_width: int = 1080
    viewport_height: int = 1440
    all_modules_data: Dict[str, dict] = field(default_factory=dict)

    def has_module(self, module_id: str) -> bool:
        return module_id in self.enabled_modules


CssFn = Callable[[Any, RenderContext], str]
HtmlFn = Callable[[Any, RenderContext], str]
VariablesFn = Callable[[Any], Dict[str, str]]


def no_style_variables(data: Any) -> Dict[str, str]:
    return {}


@dataclass(frozen=True)
class ModuleDefinition:
    """A self-contained visual unit.

    ``css``/``html``/``style_variables`` must be pure functions of the data
    and context they receive.
    """

    id: str
    name: str
    category: ModuleCategory
    stack_order: int
    schema: Type[CamelModel]
    css: CssFn
    html: HtmlFn
    style_variables: VariablesFn = no_style_variables
    dependencies: FrozenSet[str] = frozenset()
    conflicts: FrozenSet[str] = frozenset()
    allow_multiple_instances: bool = False
    description: str = ""

    def defaults(self) -> dict:
        return self.schema().to_dict()

    def parse(self, data: Optional[dict]) -> CamelModel:
        return self.schema.model_validate(data or {})

    def describe(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "category": self.category,
            "stackOrder": self.stack_order,
            "dependencies": sorted(self.dependencies),
            "conflicts": sorted(self.conflicts),
            "allowMultipleInstances": self.allow_multiple_instances,
            "defaults": self.defaults(),
        }


@dataclass
class Slide:
    """One frame of a carousel: enabled module ids and their data."""

    id: str
    enabled_modules: List[str] = field(default_factory=list)
    data: Dict[str, dict] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {"id": self.id, "enabledModules": list(self.enabled_modules), "data": self.data}

    @classmethod
    def from_dict(cls, payload: dict) -> "Slide":
        return cls(
            id=str(payload.get("id") or ""),
            enabled_modules=list(payload.get("enabledModules") or payload.get("enabled_modules") or []),
            data=dict(payload.get("data") or {}),
        )
