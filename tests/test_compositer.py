import re

import pytest

from slidegen.compositer import ComposeOptions, CompositionConfig, compose, merge_module_data
from slidegen.errors import ValidationError
from slidegen.modules.registry import build_default_registry
from slidegen.modules.types import CamelModel, ModuleDefinition, Slide


def _text(content, **style):
    return {"count": 1, "fields": [{"content": content, "style": style}]}


def _slide(**data):
    return Slide(id="s1", enabled_modules=list(data), data=data)


class _Empty(CamelModel):
    pass


def _broken_definition():
    def css(data, ctx):
        raise RuntimeError("css exploded")

    return ModuleDefinition(
        id="broken",
        name="Broken",
        category="overlay",
        stack_order=50,
        schema=_Empty,
        css=css,
        html=lambda data, ctx: '<div class="broken-marker"></div>',
    )


def test_slide_data_wins_over_shared_data():
    slide = Slide(id="s1", enabled_modules=["viewport"], data={"viewport": {"backgroundColor": "#111111"}})
    shared = {"viewport": {"backgroundColor": "#eeeeee", "blurEnabled": True, "blurAmount": 4}}

    merged = merge_module_data(slide, shared)
    assert merged["viewport"] == {"backgroundColor": "#111111", "blurEnabled": True, "blurAmount": 4}

    document = compose(slide, shared_data=shared)
    assert "background-color: #111111" in document.css
    assert "#eeeeee" not in document.css
    assert document.style_variables["viewport-bg-color"] == "#111111"


def test_nested_shared_data_is_merged_not_replaced():
    slide = Slide(id="s1", enabled_modules=["card"], data={"card": {"padding": {"top": 10}}})
    merged = merge_module_data(slide, {"card": {"padding": {"top": 99, "left": 33}}})
    assert merged["card"]["padding"] == {"top": 10, "left": 33}


def test_single_module_emits_exactly_one_root_marker():
    for content in ("Hello", "Olá <mundo> & cia", "A\nB"):
        document = compose(_slide(textFields=_text(content)))
        assert document.html.count('class="text-section"') == 1


def test_card_wraps_content_modules():
    slide = Slide(
        id="s1",
        enabled_modules=["logo", "textFields", "card", "viewport"],
        data={
            "textFields": _text("Inside the card"),
            "logo": {"enabled": True, "logoUrl": "/logo.png"},
        },
    )
    html = compose(slide, options=ComposeOptions(base_url="https://cdn.example.com")).html
    card = html.index('<div class="card-container">')
    text = html.index('class="text-section"')
    logo = html.index('class="logo-container"')
    assert card < text < logo
    assert "content-wrapper\">" not in html.split("<body>")[1]
    assert 'src="https://cdn.example.com/logo.png"' in html


def test_content_wrapper_used_without_card():
    html = compose(_slide(textFields=_text("No card here"))).html
    body = html.split("<body>")[1]
    assert '<div class="content-wrapper">' in body
    assert "card-container" not in body


def test_disabled_card_falls_back_to_content_wrapper():
    slide = _slide(card={"enabled": False}, textFields=_text("Hi"))
    body = compose(slide).html.split("<body>")[1]
    assert '<div class="content-wrapper">' in body
    assert '<div class="card-container">' not in body


def test_unknown_module_is_skipped_without_diagnostic():
    slide = Slide(id="s1", enabled_modules=["textFields", "sparkles"], data={"textFields": _text("Hi")})
    document = compose(slide)
    assert document.diagnostics == []
    assert "text-section" in document.html


def test_failing_module_becomes_a_diagnostic():
    registry = build_default_registry()
    registry.register(_broken_definition())
    slide = Slide(id="s1", enabled_modules=["textFields", "broken"], data={"textFields": _text("Still here")})

    document = compose(slide, options=ComposeOptions(registry=registry))

    assert [d.to_dict()["module"] for d in document.diagnostics] == ["broken"]
    assert document.diagnostics[0].phase == "css"
    assert "Still here" in document.html
    assert "broken-marker" in document.html


def test_invalid_module_data_is_a_data_diagnostic():
    slide = _slide(textFields={"count": 99}, logo={"enabled": True, "logoUrl": "/l.png"})
    document = compose(slide)
    assert [(d.module_id, d.phase) for d in document.diagnostics] == [("textFields", "data")]
    assert "logo-container" in document.html


def test_css_follows_registration_order():
    slide = Slide(
        id="s1",
        enabled_modules=["corners", "textFields", "viewport"],
        data={"textFields": _text("x"), "corners": {"corners": [{"type": "text", "text": "A"}] + [{"type": "none"}] * 3}},
    )
    css = compose(slide).css
    labels = re.findall(r"/\* === (.+?) === \*/", css)
    assert labels == ["Viewport", "Text Fields", "Corner Elements"]


def test_z_index_override_rewrites_module_css():
    config = CompositionConfig(zIndexOverrides={"textFields": 42})
    document = compose(_slide(textFields=_text("x")), options=ComposeOptions(composition_config=config))
    section = document.css.split("/* === Text Fields === */")[1]
    assert "z-index: 42" in section
    assert "z-index: 10" not in section


def test_render_order_controls_content_sequence():
    slide = Slide(
        id="s1",
        enabled_modules=["card", "contentImage", "textFields"],
        data={"textFields": _text("Text first"), "contentImage": {"url": "https://img.example.com/a.jpg"}},
    )
    default_html = compose(slide).html
    assert default_html.index("content-image-section") < default_html.index("text-section")

    config = CompositionConfig(renderOrder=[{"id": "1", "moduleId": "textFields"}])
    html = compose(slide, options=ComposeOptions(composition_config=config)).html
    assert html.index("text-section") < html.index("content-image-section")


def test_render_order_rejects_non_content_modules():
    config = CompositionConfig(renderOrder=[{"id": "1", "moduleId": "logo"}])
    with pytest.raises(ValidationError) as exc:
        compose(_slide(textFields=_text("x")), options=ComposeOptions(composition_config=config))
    assert exc.value.field_path == "compositionConfig.renderOrder[0]"


def test_multiple_instances_render_independently():
    slide = Slide(
        id="s1",
        enabled_modules=["textFields", "textFields-2"],
        data={"textFields": _text("First block"), "textFields-2": _text("Second block")},
    )
    document = compose(slide)
    assert document.html.count('class="text-section"') == 2
    assert "First block" in document.html and "Second block" in document.html
    assert "Text Fields (textFields-2)" in document.css


def test_carousel_scopes_each_slide():
    slides = [
        Slide(id="a", enabled_modules=["viewport", "textFields"], data={"viewport": {"backgroundColor": "#aa0000"}, "textFields": _text("One")}),
        Slide(id="b", enabled_modules=["viewport", "textFields"], data={"viewport": {"backgroundColor": "#00bb00"}, "textFields": _text("Two")}),
    ]
    document = compose(slides)

    assert document.canvas_width == 2160
    assert document.canvas_height == 1440
    assert [rect.x for rect in document.clip_rects] == [0, 1080]
    assert document.html.count('<div class="carousel-slide carousel-slide-') == 2
    assert ".carousel-slide-1 {\n  background-color: #aa0000;" in document.css
    assert ".carousel-slide-2 {\n  background-color: #00bb00;" in document.css
    assert ".carousel-slide-1 .text-section" in document.css


def test_free_image_only_on_carousels():
    overlay = {"enabled": True, "url": "/sticker.png", "scale": 5, "rotation": 15}
    single = compose(_slide(textFields=_text("x")), options=ComposeOptions(free_image=overlay))
    assert "free-image" not in single.html

    slides = [_slide(textFields=_text("x")), _slide(textFields=_text("y"))]
    carousel = compose(slides, options=ComposeOptions(free_image=overlay, base_url="https://cdn.example.com"))
    assert '<img class="free-image" src="https://cdn.example.com/sticker.png"' in carousel.html
    assert "scale(2) rotate(15deg)" in carousel.css


def test_to_dict_shape():
    payload = compose(_slide(textFields=_text("x"))).to_dict()
    assert set(payload) == {"html", "css", "canvasWidth", "canvasHeight", "styleVariables", "diagnostics"}
    assert payload["canvasWidth"] == 1080
