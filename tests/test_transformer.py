import pytest

from slidegen.errors import ValidationError
from slidegen.services.template_builder import build_slide
from slidegen.services.transformer import (
    REVERSE_CARD_STYLES,
    convert_destaques_new,
    process_carousel_data,
    sanitize_text,
)
from slidegen.carousel_schema import DestaqueChunk

from conftest import two_slide_carousel

RED = "#ff0000"
WHITE = "#ffffff"


def _carousel(*slides, destaques=None, photos=None):
    return {
        "carousel": {
            "copy": {"slides": list(slides)},
            "destaques": destaques or [],
            "photos": photos or [],
        }
    }


def _highlight(numero, field, trecho, tipo="bold", cor=True):
    return {"numero": numero, "destaques": {field: [{"trecho": trecho, "tipo": tipo, "cor": cor}]}}


def test_sanitize_text_strips_markup_characters():
    assert sanitize_text("<b>{x}</b>") == "bx/b"
    assert sanitize_text(None) == ""


def test_two_slide_scenario_layouts():
    layouts = process_carousel_data(two_slide_carousel())
    assert len(layouts) == 2
    first, second = layouts

    assert first["text1"] == "Treino de força muda tudo"
    assert first["text1Style"]["color"] == WHITE
    assert first["text1StyledChunks"] == [{"text": "muda tudo", "bold": True}]
    assert first["cardBackgroundImage"] == "https://images.example.com/1-portrait.jpg"
    assert first["cardGradientOverlay"]["enabled"] is True
    assert first["freeText1"] == "1/2"

    assert second["text1StyledChunks"] == [{"text": "oito horas", "bold": True, "color": RED}]
    assert second["contentImageUrl"] == "https://images.example.com/2-landscape.jpg"
    assert second["freeText1"] == "2/2"

    for layout in layouts:
        slide = build_slide(layout)
        assert "textFields" in slide.enabled_modules


def test_empty_fields_are_cleared_for_stack_layouts():
    layouts = process_carousel_data(_carousel({"numero": 1, "estilo": "stack-img-bg", "texto_1": "Só um", "texto_2": "  "}))
    layout = layouts[0]
    assert layout["text2"] == ""
    assert layout["text2StyledChunks"] == []
    assert layout["customCardContainerStyles"] == ""


def test_reverse_moves_text_padding_and_flips_card():
    layouts = process_carousel_data(_carousel({"numero": 1, "estilo": "stack-img-bg reverse", "texto_1": "Invertido"}))
    layout = layouts[0]
    assert layout["customCardContainerStyles"] == REVERSE_CARD_STYLES
    assert layout["customContentImageSectionStyles"] == "margin-top: 5%;"
    assert layout["textPaddingBottom"] == 40
    assert layout["textPaddingTop"] == 0


def test_secondary_color_for_black_variants():
    data = _carousel(
        {"numero": 1, "estilo": "ff_stack1-b", "texto_1": "Fundo preto"},
        destaques=[_highlight(1, "texto_1", "preto")],
    )
    layout = process_carousel_data(data, highlight_color="#00ff00", highlight_color_secondary="#ffcc00")[0]
    assert layout["text1StyledChunks"] == [{"text": "preto", "bold": True, "color": "#ffcc00"}]
    assert "freeText1" not in layout


def test_background_highlights():
    data = _carousel(
        {"numero": 1, "estilo": "stack-img-bg", "texto_1": "Primeiro destaque e segundo destaque"},
        destaques=[
            {
                "numero": 1,
                "destaques": {
                    "texto_1": [
                        {"trecho": "Primeiro", "tipo": "bg4", "cor": True},
                        {"trecho": "segundo", "tipo": "bg4 secondary", "cor": True},
                    ]
                },
            }
        ],
    )
    chunks = process_carousel_data(data)[0]["text1StyledChunks"]
    assert chunks == [
        {"text": "Primeiro", "backgroundColor": RED, "padding": "4px"},
        {"text": "segundo", "backgroundColor": WHITE, "padding": "4px"},
    ]


def test_main_text_is_enlarged():
    data = _carousel(
        {
            "numero": 1,
            "estilo": "stack-img-bg",
            "texto_1": "Titulo",
            "texto_2": "O texto principal aqui",
            "texto_principal": "texto_2",
        },
        destaques=[_highlight(1, "texto_2", "principal")],
    )
    layout = process_carousel_data(data)[0]
    assert layout["text2Style"]["fontSize"] == "48px"
    assert layout["text2Style"]["fontWeight"] == "700"
    assert layout["text2StyledChunks"][0]["fontWeight"] == "900"
    assert layout["text1Style"]["fontSize"] == "52px"


def test_unmatched_highlight_is_ignored():
    data = _carousel(
        {"numero": 1, "estilo": "stack-img-bg", "texto_1": "Nada aqui"},
        destaques=[_highlight(1, "texto_1", "inexistente")],
    )
    layout = process_carousel_data(data)[0]
    assert layout["text1StyledChunks"] == []


def test_fitfeed_capa_cover():
    data = _carousel(
        {"numero": 1, "estilo": "ff_capa", "texto_1": "Fallback", "titulo": "Cinco hábitos"},
        destaques=[_highlight(1, "titulo", "hábitos")],
        photos=[{"photo": {"src": {"portrait": "https://images.example.com/p.jpg"}}, "slide": 1}],
    )
    layout = process_carousel_data(data, card_gradient={"color": "#123456"})[0]
    assert layout["template"] == "fitfeed-capa"
    assert layout["title"] == "Cinco hábitos"
    assert layout["titleStyledChunks"] == [{"text": "hábitos", "bold": True, "color": RED}]
    assert layout["viewportBackgroundImage"] == "https://images.example.com/p.jpg"
    assert "freeText1" not in layout
    slide = build_slide(layout)
    assert slide.data["textFields"]["fields"][0]["content"] == "Cinco hábitos"


def test_fitfeed_capa_special_styling_replaces_highlights():
    data = _carousel(
        {
            "numero": 1,
            "estilo": "ff_capa",
            "texto_1": "Linha um\nLinha dois",
            "titleSpecialStyling": {"enabled": True, "lineStyles": [{"color": "#ff0000"}, {"color": "#00ff00"}]},
        },
        destaques=[_highlight(1, "titulo", "Linha")],
    )
    layout = process_carousel_data(data)[0]
    assert layout["title"] == "Linha um\nLinha dois"
    assert layout["titleSpecialStyling"]["lineStyles"][1]["color"] == "#00ff00"
    assert "titleStyledChunks" not in layout
    chunks = build_slide(layout).data["textFields"]["fields"][0]["styledChunks"]
    assert [c["text"] for c in chunks] == ["Linha um", "Linha dois"]


def test_card_gradient_override_merges():
    layout = process_carousel_data(two_slide_carousel(), card_gradient={"color": "#123456", "height": 80})[0]
    gradient = layout["cardGradientOverlay"]
    assert gradient["color"] == "#123456"
    assert gradient["height"] == 80
    assert gradient["startOpacity"] == 0.7


def test_convert_destaques_new_bold_only():
    chunks = [DestaqueChunk(trecho="forte", tipo="bold+italic", cor=True)]
    assert convert_destaques_new("muito forte", chunks, RED, bold_only=True) == [
        {"text": "forte", "bold": True, "italic": True}
    ]


def test_invalid_input_raises_validation_error():
    with pytest.raises(ValidationError) as exc:
        process_carousel_data({"foo": 1})
    assert exc.value.issues
