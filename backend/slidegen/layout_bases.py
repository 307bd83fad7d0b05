"""
Layout bases for carousel estilos.

Each base is a flat template layout (camelCase keys, the same shape the batch
endpoint accepts) that the carousel transformer copies and fills with slide
text, highlights and photos.
"""

import copy
from typing import Optional

WIDTH = 1080
HEIGHT = 1440


def _style(size: str, weight: str, color: str, family: str = "Montserrat", **extra) -> dict:
    style = {
        "fontFamily": family,
        "fontSize": size,
        "fontWeight": weight,
        "color": color,
        "textAlign": "left",
        "lineHeight": "1.25",
    }
    style.update(extra)
    return style


def _stack_texts(color: str) -> dict:
    return {
        "text1Style": _style("52px", "800", color),
        "text2Style": _style("36px", "500", color),
        "text3Style": _style("32px", "400", color),
        "text4Style": _style("28px", "400", color),
        "text5Style": _style("24px", "400", color),
    }


_COUNTER_STYLE = _style("24px", "600", "#ffffff", letterSpacing="1px")


# ============================================
# STACK (photo driven)
# ============================================
_STACK_IMG = {
    "id": "stack-img",
    "name": "Stack with photo card",
    "description": "Portrait photo fills the card, white text over a bottom gradient",
    "template": "stack",
    "viewportBackgroundColor": "#111111",
    "cardWidth": 90,
    "cardHeight": 92,
    "cardBorderRadius": 24,
    "cardBackgroundColor": "#222222",
    "cardPadding": 70,
    "cardGradientOverlay": {
        "enabled": True,
        "color": "#000000",
        "startOpacity": 0.7,
        "midOpacity": 0.4,
        "height": 60,
        "direction": "to top",
    },
    "textVerticalAlign": "bottom",
    "textGap": 24,
    "freeText1Style": _COUNTER_STYLE,
    **_stack_texts("#ffffff"),
}

_STACK_IMG_BG = {
    "id": "stack-img-bg",
    "name": "Stack with content image",
    "description": "Light card with a landscape photo above the text",
    "template": "stack",
    "viewportBackgroundColor": "#1a1a1a",
    "cardWidth": 90,
    "cardHeight": 92,
    "cardBorderRadius": 24,
    "cardBackgroundColor": "#ffffff",
    "cardPadding": 60,
    "contentImageBorderRadius": 16,
    "textVerticalAlign": "top",
    "textGap": 20,
    "textPaddingTop": 40,
    "freeText1Style": _COUNTER_STYLE,
    **_stack_texts("#111111"),
}


# ============================================
# FITFEED
# ============================================
def _ff_stack(layout_id: str, name: str, dark: bool, image_first: bool) -> dict:
    text_color = "#ffffff" if dark else "#111111"
    base = {
        "id": layout_id,
        "name": name,
        "description": f"FitFeed stack, {'dark' if dark else 'light'} background",
        "template": "stack",
        "viewportBackgroundColor": "#000000" if dark else "#f2f2f2",
        "cardWidth": 100,
        "cardHeight": 100,
        "cardBorderRadius": 0,
        "cardBackgroundColor": "#000000" if dark else "#f2f2f2",
        "cardPadding": 80,
        "contentImageBorderRadius": 0 if image_first else 24,
        "textVerticalAlign": "top" if image_first else "bottom",
        "textGap": 28,
        "textPaddingTop": 50 if image_first else 0,
        **_stack_texts(text_color),
    }
    base["text1Style"] = _style("64px", "900", text_color, family="Bebas Neue", textTransform="uppercase")
    if not image_first:
        base["customCardContainerStyles"] = "flex-direction: column-reverse; justify-content: flex-end;"
    return base


_FF_CAPA = {
    "id": "ff_capa",
    "name": "FitFeed Capa",
    "description": "Cover with a big title over a full-bleed photo",
    "template": "fitfeed-capa",
    "viewportBackgroundType": "image",
    "viewportBackgroundColor": "#000000",
    "viewportGradientOverlay": {
        "enabled": True,
        "color": "#000000",
        "startOpacity": 0.85,
        "midOpacity": 0.4,
        "height": 55,
        "direction": "to top",
    },
    "title": "",
    "titleStyle": {
        "fontFamily": "Bebas Neue",
        "fontSize": "96px",
        "fontWeight": "900",
        "color": "#ffffff",
        "textAlign": "left",
        "textTransform": "uppercase",
        "letterSpacing": "-1px",
        "lineHeight": "1.05",
    },
    "logoImageSpecialPosition": "top-left",
    "logoImageSpecialPadding": 5,
    "arrowImageSpecialPosition": "bottom-right",
    "arrowImageSpecialPadding": 6,
    "bottomText": "Arrasta para o lado",
    "bottomTextSpecialPosition": "bottom-right",
    "bottomTextSpecialPadding": 3,
}


LAYOUT_BASES = {
    "stack-img": _STACK_IMG,
    "stack-img-bg": _STACK_IMG_BG,
    "ff_stack1": _ff_stack("ff_stack1", "FitFeed Stack 1", dark=False, image_first=True),
    "ff_stack1-b": _ff_stack("ff_stack1-b", "FitFeed Stack 1 (black)", dark=True, image_first=True),
    "ff_stack2": _ff_stack("ff_stack2", "FitFeed Stack 2", dark=False, image_first=False),
    "ff_stack2-b": _ff_stack("ff_stack2-b", "FitFeed Stack 2 (black)", dark=True, image_first=False),
    "ff_capa": _FF_CAPA,
}

_META_KEYS = ("id", "name", "description")


def base_estilo(estilo: str) -> str:
    """'stack-img reverse' -> 'stack-img'."""
    estilo = estilo.strip()
    if estilo.lower().endswith(" reverse"):
        estilo = estilo[: -len(" reverse")]
    return estilo.strip()


def get_layout_base(estilo: str) -> Optional[dict]:
    """Deep copy of the layout base for ``estilo`` (reverse variants share their base)."""
    base = LAYOUT_BASES.get(base_estilo(estilo))
    if base is None:
        return None
    return {key: copy.deepcopy(value) for key, value in base.items() if key not in _META_KEYS}


def list_layout_bases():
    """List all layout bases."""
    return [
        {"id": b["id"], "name": b["name"], "description": b["description"], "template": b["template"]}
        for b in LAYOUT_BASES.values()
    ]
