from slidegen.modules.types import StyledChunk, TextStyle
from slidegen.rich_text import apply_styled_chunks, parse_inline_styles, process_text_field


def test_without_chunks_text_is_escaped():
    assert apply_styled_chunks("a < b & c", []) == "a &lt; b &amp; c"


def test_only_first_occurrence_is_styled():
    html = apply_styled_chunks("go go go", [StyledChunk(text="go", color="#ff0000")])
    assert html == '<span style="color:#ff0000">go</span> go go'


def test_unmatched_and_overlapping_chunks_are_skipped():
    chunks = [
        StyledChunk(text="muda tudo", bold=True),
        StyledChunk(text="tudo agora", color="#00ff00"),
        StyledChunk(text="inexistente", color="#0000ff"),
    ]
    html = apply_styled_chunks("Treino muda tudo agora", chunks)
    assert html == 'Treino <span style="font-weight:bold">muda tudo</span> agora'


def test_chunk_values_override_parent():
    parent = TextStyle(color="#000000", font_size="36px", font_weight="400")
    chunk = StyledChunk(text="forte", color="#ff0000", bold=True)
    html = apply_styled_chunks("muito forte", [chunk], parent)
    assert 'style="color:#ff0000;font-size:36px;font-weight:bold"' in html


def test_explicit_font_weight_wins_over_bold():
    html = apply_styled_chunks("peso", [StyledChunk(text="peso", bold=True, fontWeight="900")])
    assert "font-weight:900" in html
    assert "font-weight:bold" not in html


def test_chunk_padding_is_important():
    chunk = StyledChunk(text="fundo", backgroundColor="#ffffff", padding="4px")
    html = apply_styled_chunks("fundo branco", [chunk])
    assert "background-color:#ffffff" in html
    assert "padding:4px !important" in html


def test_parent_wrapper_becomes_block_with_text_align():
    parent = TextStyle(color="#111111", text_align="center")
    html = apply_styled_chunks("titulo", [StyledChunk(text="tit", italic=True)], parent)
    assert html.startswith('<span style="color:#111111;text-align:center;display:block">')


def test_unsafe_values_are_dropped():
    chunk = StyledChunk(text="x", color="red;} body{display:none", fontSize="12px")
    html = apply_styled_chunks("x", [chunk])
    assert "display:none" not in html
    assert "font-size:12px" in html


def test_inline_syntax():
    html = parse_inline_styles("[Olá|cor:#ff0000;negrito:true] mundo")
    assert html == '<span style="color:#ff0000;font-weight:bold">Olá</span> mundo'


def test_process_text_field_prefers_chunks():
    chunks = [StyledChunk(text="b", bold=True)]
    assert process_text_field("[a|cor:red] b", chunks) == '[a|cor:red] <span style="font-weight:bold">b</span>'
    assert process_text_field("", chunks) == ""
