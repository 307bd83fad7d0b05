"""
Module registry: lookup of module definitions by id, combination checks and
stable stack-order sorting.
"""

import logging
import re
from functools import lru_cache
from typing import Dict, Iterable, List, Optional

from slidegen.errors import DependencyError, DuplicateModuleError
from slidegen.modules import bullets, card, content_image, corners, free_text, logo, svg_elements, text_fields, viewport
from slidegen.modules.types import ModuleDefinition, Slide

logger = logging.getLogger(__name__)

_INSTANCE_RE = re.compile(r"^(.+)-(\d+)$")


def base_module_id(module_id: str) -> str:
    """'textFields-2' -> 'textFields'. Ids without an instance suffix are returned as is."""
    match = _INSTANCE_RE.match(module_id)
    return match.group(1) if match else module_id


class ModuleRegistry:
    def __init__(self):
        self._definitions: Dict[str, ModuleDefinition] = {}
        self._order: Dict[str, int] = {}

    def register(self, definition: ModuleDefinition) -> ModuleDefinition:
        if definition.id in self._definitions:
            raise DuplicateModuleError(definition.id)
        self._order[definition.id] = len(self._order)
        self._definitions[definition.id] = definition
        return definition

    def get(self, module_id: str) -> Optional[ModuleDefinition]:
        """Definition for ``module_id`` or an instance of it, or None."""
        definition = self._definitions.get(module_id)
        if definition is not None:
            return definition
        base = base_module_id(module_id)
        if base == module_id:
            return None
        definition = self._definitions.get(base)
        if definition is not None and definition.allow_multiple_instances:
            return definition
        return None

    def __contains__(self, module_id: str) -> bool:
        return self.get(module_id) is not None

    def __len__(self) -> int:
        return len(self._definitions)

    def registration_index(self, module_id: str) -> int:
        return self._order.get(base_module_id(module_id), len(self._order))

    def definitions(self) -> List[ModuleDefinition]:
        return list(self._definitions.values())

    def describe(self) -> List[dict]:
        return [definition.describe() for definition in self._definitions.values()]

    def validate_combination(self, module_ids: Iterable[str]) -> List[str]:
        """Dependency and conflict violations for a set of enabled ids. Empty means valid."""
        ids = list(module_ids)
        present = {base_module_id(module_id) for module_id in ids}
        violations = []
        for module_id in ids:
            definition = self.get(module_id)
            if definition is None:
                violations.append(f"Module '{module_id}' is not registered")
                continue
            for dependency in sorted(definition.dependencies):
                if dependency not in present:
                    violations.append(f"Module '{module_id}' requires '{dependency}'")
            for conflict in sorted(definition.conflicts):
                if conflict in present:
                    violations.append(f"Module '{module_id}' conflicts with '{conflict}'")
        return violations

    def sort_by_stack_order(self, module_ids: Iterable[str]) -> List[str]:
        """Stable ascending sort by stack order. Equal orders keep their input order.

        Unknown ids are dropped.
        """
        known = []
        for position, module_id in enumerate(module_ids):
            definition = self.get(module_id)
            if definition is None:
                continue
            known.append((definition.stack_order, position, module_id))
        known.sort()
        return [entry[-1] for entry in known]

    def sort_definitions(self, definitions: Iterable[ModuleDefinition]) -> List[ModuleDefinition]:
        return sorted(definitions, key=lambda d: (d.stack_order, self.registration_index(d.id)))

    # Slide mutation helpers

    def enable_module(self, slide: Slide, module_id: str, data: Optional[dict] = None, strict: bool = False) -> Slide:
        """Enable ``module_id`` on ``slide``.

        With ``strict`` the resulting combination must be valid, otherwise
        ``DependencyError`` is raised and the slide is left untouched.
        """
        if module_id in slide.enabled_modules:
            if data is not None:
                slide.data[module_id] = data
            return slide
        candidate = slide.enabled_modules + [module_id]
        if strict:
            violations = self.validate_combination(candidate)
            if violations:
                raise DependencyError(violations)
        elif module_id not in self:
            logger.warning(f"Enabling unregistered module '{module_id}' on slide {slide.id}")
        slide.enabled_modules = candidate
        if data is not None:
            slide.data[module_id] = data
        elif module_id not in slide.data:
            definition = self.get(module_id)
            if definition is not None:
                slide.data[module_id] = definition.defaults()
        return slide

    def disable_module(self, slide: Slide, module_id: str, strict: bool = False) -> Slide:
        if module_id not in slide.enabled_modules:
            return slide
        candidate = [m for m in slide.enabled_modules if m != module_id]
        if strict:
            violations = self.validate_combination(candidate)
            if violations:
                raise DependencyError(violations)
        slide.enabled_modules = candidate
        return slide

    def validate_slide(self, slide: Slide) -> None:
        violations = self.validate_combination(slide.enabled_modules)
        if violations:
            raise DependencyError(violations)


DEFAULT_MODULES = (
    viewport.DEFINITION,
    card.DEFINITION,
    text_fields.DEFINITION,
    content_image.DEFINITION,
    bullets.DEFINITION,
    free_text.DEFINITION,
    logo.DEFINITION,
    corners.DEFINITION,
    svg_elements.DEFINITION,
)


def build_default_registry() -> ModuleRegistry:
    registry = ModuleRegistry()
    for definition in DEFAULT_MODULES:
        registry.register(definition)
    return registry


@lru_cache()
def get_registry() -> ModuleRegistry:
    return build_default_registry()
