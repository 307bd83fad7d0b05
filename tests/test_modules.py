from slidegen.compositer import ComposeOptions, compose
from slidegen.modules.helpers import escape_html, hex_to_rgb, resolve_url
from slidegen.modules.svg_elements import color_filter
from slidegen.modules.types import Slide
from slidegen.presets import apply_preset, list_presets, preset_slide


def _compose(**data):
    return compose(Slide(id="s1", enabled_modules=list(data), data=data), options=ComposeOptions(base_url="https://cdn.example.com/"))


def test_resolve_url():
    assert resolve_url("https://x.com/a.png", "https://cdn.example.com") == "https://x.com/a.png"
    assert resolve_url("/a.png", "https://cdn.example.com/") == "https://cdn.example.com/a.png"
    assert resolve_url("a.png", "https://cdn.example.com") == "https://cdn.example.com/a.png"
    assert resolve_url("", "https://cdn.example.com") == ""


def test_escape_and_colors():
    assert escape_html("<a href=\"x\">'&'</a>") == "&lt;a href=&quot;x&quot;&gt;&#039;&amp;&#039;&lt;/a&gt;"
    assert hex_to_rgb("#ff8800") == "255, 136, 0"
    assert hex_to_rgb("not-a-color") == "0, 0, 0"


def test_viewport_image_and_gradient():
    document = _compose(
        viewport={
            "backgroundType": "image",
            "backgroundImage": "bg.jpg",
            "gradientOverlay": {"enabled": True, "color": "#000000", "startOpacity": 0.8},
        }
    )
    assert "url(https://cdn.example.com/bg.jpg)" in document.css
    assert "rgba(0, 0, 0, 0.8) 0%" in document.css


def test_bullets_numbered_and_emoji():
    document = _compose(
        bullets={
            "items": [
                {"text": "Primeiro", "iconType": "number"},
                {"text": "Segundo", "iconType": "emoji", "icon": "🔥"},
                {"text": "", "iconType": "number"},
            ]
        }
    )
    assert document.html.count('class="bullets-section"') == 1
    assert '<div class="bullet-icon">1</div>' in document.html
    assert "🔥" in document.html
    assert "bullet-card bullet-card-3" not in document.html


def test_hidden_logo_emits_nothing():
    document = _compose(logo={"enabled": False, "logoUrl": "/logo.png"})
    assert "logo-container" not in document.html
    assert "logo-container" not in document.css


def test_logo_filter_and_position():
    document = _compose(logo={"enabled": True, "logoUrl": "/logo.png", "filter": "white", "specialPosition": "bottom-right"})
    assert "filter: brightness(0) invert(1);" in document.css
    assert "bottom: 40px; right: 40px;" in document.css


def test_corners_use_default_anchor_when_unpositioned():
    corners = [
        {"type": "text", "text": "@conta"},
        {"type": "none"},
        {"type": "none"},
        {"type": "svg", "svgUrl": "/arrow.svg"},
    ]
    document = _compose(corners={"corners": corners})
    assert '<div class="corner corner-1"><span class="corner-1-text">@conta</span></div>' in document.html
    assert 'src="https://cdn.example.com/arrow.svg"' in document.html
    assert "corner-2" not in document.html
    assert "z-index: 99;" in document.css


def test_free_text_special_position_uses_viewport_percent():
    document = _compose(
        freeText={"count": 1, "texts": [{"content": "1/5", "specialPosition": "top-right", "specialPadding": 4}]}
    )
    assert "top: 57.6px; right: 43.2px;" in document.css
    assert '<div class="free-text free-text-1">1/5</div>' in document.html


def test_presets():
    assert {p["id"] for p in list_presets()} == {"stack", "minimal", "fitfeed-capa"}
    merged = apply_preset("stack", {"card": {"backgroundColor": "#000000"}})
    assert merged["card"]["backgroundColor"] == "#000000"
    assert merged["card"]["borderRadius"] == 20
    assert apply_preset("missing", {"card": {"width": 10}}) == {"card": {"width": 10}}

    slide = preset_slide("minimal")
    assert slide.enabled_modules == ["viewport", "card", "textFields"]
    assert compose(slide).diagnostics == []


def test_svg_elements_only_render_enabled_entries():
    document = _compose(
        svgElements={
            "svgElements": [
                {"enabled": True, "svgUrl": "/icons/star.svg", "specialPosition": "top-right", "specialPadding": 5},
                {"enabled": False, "svgUrl": "/icons/hidden.svg"},
                {"enabled": True, "svgUrl": "", "rotation": 45},
            ]
        }
    )
    assert '<img src="https://cdn.example.com/icons/star.svg" alt="SVG 1" />' in document.html
    assert "hidden.svg" not in document.html
    assert 'class="svg-element svg-element-3"' not in document.html
    assert "top: 72px; right: 54px;" in document.css
    assert "filter: brightness(0) saturate(100%) invert(100%);" in document.css


def test_svg_elements_manual_position_with_rotation():
    document = _compose(
        svgElements={"svgElements": [{"enabled": True, "svgUrl": "/a.svg", "rotation": 90, "zIndexOverride": 7}]}
    )
    assert "top: 50px; left: 50px; transform: rotate(90deg);" in document.css
    assert "z-index: 7;" in document.css
    assert document.style_variables["svg1-rotation"] == "90deg"


def test_svg_elements_without_visible_entries_emit_no_layer():
    document = _compose(svgElements={})
    assert 'class="svg-elements-layer"' not in document.html


def test_color_filter():
    assert color_filter("#FFF") == "brightness(0) saturate(100%) invert(100%)"
    assert color_filter("black") == "brightness(0) saturate(100%)"
    assert color_filter("not-a-colour") == "none"
    assert color_filter("#ff0000") == (
        "brightness(0) saturate(100%) invert(0%) sepia(100%) saturate(2000%) "
        "hue-rotate(0deg) brightness(100%) contrast(100%)"
    )
