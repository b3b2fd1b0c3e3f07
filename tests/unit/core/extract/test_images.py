"""Unit tests for core/extract/images.py"""

import pytest

from mdimport.core.extract.images import extract_inline_images, make_token


def test_plain_path_with_caption():
    """A plain path plus quoted caption yields one ImageRef with all three parts."""
    text, images = extract_inline_images('![A cat](./img/cat.png "Sleepy cat")', nonce="n1")
    assert len(images) == 1
    img = images[0]
    assert (img.alt, img.src, img.caption) == ("A cat", "./img/cat.png", "Sleepy cat")
    assert img.token == make_token("n1", 0)
    assert img.token in text
    assert "![" not in text


def test_angle_bracket_path_allows_spaces():
    """<...> paths may contain spaces."""
    _, images = extract_inline_images('![diagram](<./my images/flow chart.png> "Flow")', nonce="n1")
    assert images[0].src == "./my images/flow chart.png"
    assert images[0].caption == "Flow"


def test_caption_is_optional():
    _, images = extract_inline_images("![x](pic.jpg)", nonce="n1")
    assert images[0].caption == ""
    assert images[0].alt == "x"


def test_token_placed_on_own_paragraph():
    """The token is surrounded by blank lines so the converter sees a separate paragraph."""
    text, images = extract_inline_images("Before ![a](a.png) after.", nonce="n1")
    assert f"\n\n{images[0].token}\n\n" in text
    assert text.startswith("Before ")
    assert text.endswith(" after.")


def test_tokens_increase_in_source_order():
    """Tokens are numbered by order of first appearance and are unique."""
    md = "![one](1.png)\n\ntext\n\n![two](2.png) and ![three](3.png)"
    _, images = extract_inline_images(md, nonce="n1")
    assert [i.src for i in images] == ["1.png", "2.png", "3.png"]
    assert [i.token for i in images] == [make_token("n1", n) for n in range(3)]
    assert len({i.token for i in images}) == 3


def test_repeated_reference_gets_distinct_tokens():
    """The same image referenced twice produces two tokens (and two image blocks later)."""
    _, images = extract_inline_images("![a](same.png) ![b](same.png)", nonce="n1")
    assert len(images) == 2
    assert images[0].token != images[1].token


@pytest.mark.parametrize("md", [
    "![broken](no-close.png",
    "![alt] (space-before-paren.png)",
    "[not an image](link.png)",
])
def test_malformed_syntax_passes_through(md):
    """Anything the pattern does not match is left as literal text."""
    text, images = extract_inline_images(md, nonce="n1")
    assert images == []
    assert text == md


def test_random_nonce_avoids_lookalike_text():
    """Without an explicit nonce, tokens don't collide with token-shaped text in the post."""
    lookalike = make_token("deadbeef", 0)
    text, images = extract_inline_images(f"{lookalike}\n\n![a](a.png)")
    assert images[0].token != lookalike
    assert text.count(images[0].token) == 1


def test_alt_and_caption_are_stripped():
    _, images = extract_inline_images('![  spaced alt  ](a.png "  cap  ")', nonce="n1")
    assert images[0].alt == "spaced alt"
    assert images[0].caption == "cap"


@pytest.mark.parametrize("md", [
    "Example:\n\n```md\n![a](./cat.png)\n```\n",
    "Example:\n\n    ![a](./cat.png)\n",
    "Write `![a](./cat.png)` to embed.",
    "Or ``![a](./cat.png) with a ` inside``.",
])
def test_image_syntax_in_code_is_left_alone(md):
    text, images = extract_inline_images(md, nonce="n1")
    assert images == []
    assert text == md


def test_code_and_real_images_mixed():
    md = "```\n![code](code.png)\n```\n\nSee `![span](span.png)` then ![real](real.png)\n"
    text, images = extract_inline_images(md, nonce="n1")
    assert [i.src for i in images] == ["real.png"]
    assert "![code](code.png)" in text
    assert "`![span](span.png)`" in text


def test_crlf_line_endings_are_normalized():
    text, images = extract_inline_images("```\r\n![a](a.png)\r\n```\r\n\r\n![b](b.png)\r\n", nonce="n1")
    assert [i.src for i in images] == ["b.png"]
    assert "\r" not in text
