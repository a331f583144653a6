import pytest

from termslides.html import Color, FontSize, HtmlText, TextStyle, color_to_html


@pytest.mark.parametrize(
    ("style", "expected"),
    [
        (TextStyle(), ""),
        (TextStyle().bold(), "font-weight: bold"),
        (TextStyle().italics(), "font-style: italic"),
        (TextStyle().bold().italics(), "font-weight: bold; font-style: italic"),
        (TextStyle().strikethrough(), "text-decoration: line-through"),
        (TextStyle().underlined(), "text-decoration: underline"),
        (TextStyle().strikethrough().underlined(), "text-decoration: line-through underline"),
        (TextStyle().fg_color(Color.rgb(1, 2, 3)), "color: #010203"),
        (TextStyle().bg_color(Color.rgb(1, 2, 3)), "background-color: #010203"),
        (TextStyle().with_size(3), "font-size: 6px"),
    ],
)
def test_html_text(style, expected):
    html_text = HtmlText.new("", style, FontSize(2))
    assert (html_text.style or "") == expected


def test_render_span():
    html_text = HtmlText.new("hi", TextStyle().bold(), FontSize(1))
    assert str(html_text) == '<span style="font-weight: bold">hi</span>'


def test_plain_text_renders_as_is():
    html_text = HtmlText.new("a<b", TextStyle(), FontSize(10))
    assert html_text.style is None
    assert str(html_text) == "a<b"


@pytest.mark.parametrize(
    ("color", "expected"),
    [
        (Color.BLACK, "#000000"),
        (Color.DARK_GREY, "#5a5a5a"),
        (Color.DARK_YELLOW, "#8b8000"),
        (Color.GREY, "#808080"),
        (Color.rgb(255, 0, 171), "#ff00ab"),
    ],
)
def test_color_to_html(color, expected):
    assert color_to_html(color) == expected


def test_font_size_scale():
    assert FontSize(10).scale(2) == "20px"


def test_invalid_rgb():
    with pytest.raises(ValueError):
        Color.rgb(256, 0, 0)


def test_style_builders_do_not_mutate():
    base = TextStyle()
    bold = base.bold()
    assert base == TextStyle()
    assert bold.is_bold