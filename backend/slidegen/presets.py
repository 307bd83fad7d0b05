"""
Template presets.

A preset is a starting point: which modules are enabled and the module data
that overrides the plain module defaults. Users then toggle modules and edit
values on top of it.
"""

import copy
from typing import Dict, List, Optional

from slidegen.modules.helpers import deep_merge
from slidegen.modules.types import Slide


def _field(size: str, weight: str, color: str = "#000000", align: str = "left", **style) -> dict:
    return {
        "content": "",
        "style": {
            "fontFamily": style.pop("fontFamily", "Arial"),
            "fontSize": size,
            "fontWeight": weight,
            "color": color,
            "textAlign": align,
            "textTransform": style.pop("textTransform", "none"),
            **style,
        },
        "styledChunks": [],
    }


_NO_GRADIENT = {"enabled": False}

_EMPTY_CORNERS = {"corners": [{"type": "none"} for _ in range(4)]}


PRESETS = {
    "stack": {
        "id": "stack",
        "name": "Stack Layout",
        "description": "Text fields, content image and corner elements inside a card",
        "default_modules": ["viewport", "card", "textFields", "contentImage", "corners", "logo"],
        "module_defaults": {
            "viewport": {
                "backgroundType": "color",
                "backgroundColor": "#ffffff",
                "blurEnabled": False,
                "gradientOverlay": _NO_GRADIENT,
            },
            "card": {
                "enabled": True,
                "width": 85,
                "height": 85,
                "borderRadius": 20,
                "backgroundType": "color",
                "backgroundColor": "#f5f5f5",
                "padding": {"top": 60, "right": 60, "bottom": 60, "left": 60},
                "gradientOverlay": _NO_GRADIENT,
                "shadow": {"enabled": False},
            },
            "textFields": {
                "count": 5,
                "gap": 20,
                "verticalAlign": "bottom",
                "fields": [
                    _field("68px", "700"),
                    _field("48px", "600"),
                    _field("32px", "500"),
                    _field("24px", "400"),
                    _field("20px", "400"),
                ],
            },
            "contentImage": {
                "enabled": True,
                "url": "",
                "borderRadius": 20,
                "maxWidth": 100,
                "maxHeight": 100,
                "mode": "single",
            },
            "corners": _EMPTY_CORNERS,
            "logo": {
                "enabled": False,
                "logoUrl": "",
                "width": "auto",
                "height": 80,
                "specialPosition": "top-right",
                "opacity": 1,
            },
        },
    },
    "minimal": {
        "id": "minimal",
        "name": "Minimal",
        "description": "Just a background, a card and three centered text fields",
        "default_modules": ["viewport", "card", "textFields"],
        "module_defaults": {
            "viewport": {
                "backgroundType": "color",
                "backgroundColor": "#ffffff",
                "blurEnabled": False,
                "gradientOverlay": _NO_GRADIENT,
            },
            "card": {
                "enabled": True,
                "width": 90,
                "height": 90,
                "borderRadius": 0,
                "backgroundType": "color",
                "backgroundColor": "#ffffff",
                "padding": {"top": 80, "right": 80, "bottom": 80, "left": 80},
                "gradientOverlay": _NO_GRADIENT,
                "shadow": {"enabled": False},
            },
            "textFields": {
                "count": 3,
                "gap": 30,
                "verticalAlign": "center",
                "fields": [
                    _field("48px", "700", align="center"),
                    _field("24px", "400", color="#666666", align="center"),
                    _field("18px", "400", color="#999999", align="center"),
                ],
            },
        },
    },
    "fitfeed-capa": {
        "id": "fitfeed-capa",
        "name": "FitFeed Capa",
        "description": "Cover with a bold title over a full-bleed background image and a logo",
        "default_modules": ["viewport", "textFields", "freeText", "corners", "logo"],
        "module_defaults": {
            "viewport": {
                "backgroundType": "image",
                "backgroundColor": "#000000",
                "backgroundImage": "",
                "blurEnabled": False,
                "gradientOverlay": {
                    "enabled": True,
                    "color": "#000000",
                    "startOpacity": 0.7,
                    "midOpacity": 0.4,
                    "endOpacity": 0.1,
                    "height": 60,
                    "direction": "to top",
                    "blendMode": "normal",
                },
            },
            "textFields": {
                "count": 2,
                "gap": 20,
                "verticalAlign": "bottom",
                "fields": [
                    _field(
                        "72px",
                        "900",
                        color="#ffffff",
                        fontFamily="Bebas Neue",
                        textTransform="uppercase",
                        padding="10px 20px",
                        backgroundColor="#000000",
                    ),
                    _field("24px", "500", color="#ffffff", fontFamily="Montserrat"),
                ],
            },
            "freeText": {"count": 1, "texts": [{"content": ""}]},
            "corners": _EMPTY_CORNERS,
            "logo": {
                "enabled": False,
                "logoUrl": "",
                "width": "auto",
                "height": 100,
                "specialPosition": "top-left",
                "opacity": 0.9,
            },
        },
    },
}


def get_preset(preset_id: str) -> Optional[dict]:
    return PRESETS.get(preset_id)


def list_presets() -> List[dict]:
    return [
        {
            "id": preset["id"],
            "name": preset["name"],
            "description": preset["description"],
            "defaultModules": list(preset["default_modules"]),
        }
        for preset in PRESETS.values()
    ]


def apply_preset(preset_id: str, module_data: Optional[Dict[str, dict]] = None) -> Dict[str, dict]:
    """Preset module defaults deep-merged under ``module_data``. User data always wins.

    Unknown preset ids leave ``module_data`` unchanged.
    """
    module_data = module_data or {}
    preset = get_preset(preset_id)
    if preset is None:
        return dict(module_data)
    merged = copy.deepcopy(preset["module_defaults"])
    for module_id, data in module_data.items():
        merged[module_id] = deep_merge(merged.get(module_id, {}), data or {})
    return merged


def preset_slide(preset_id: str, slide_id: str = "slide-1", module_data: Optional[Dict[str, dict]] = None) -> Slide:
    """A slide with the preset's modules enabled and its defaults applied."""
    preset = get_preset(preset_id)
    enabled = list(preset["default_modules"]) if preset else list((module_data or {}).keys())
    return Slide(id=slide_id, enabled_modules=enabled, data=apply_preset(preset_id, module_data))
