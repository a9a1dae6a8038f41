import pytest

from minder.lib import ansi
from minder.lib.ansi import DEFAULT, PLAIN, Theme, bold, dim, strip


@pytest.fixture
def plain_theme():
    ansi.use(PLAIN)
    yield
    ansi.use(DEFAULT)


def test_theme_defaults():
    assert DEFAULT.bold == "\033[1m"
    assert DEFAULT.reset == "\033[0m"


def test_theme_colors():
    t = Theme()
    assert t.red == "\033[38;5;203m"
    assert t.green == "\033[38;5;114m"
    assert t.muted == "\033[90m"


def test_bold():
    result = bold("hi")
    assert "\033[1m" in result
    assert "hi" in result
    assert "\033[0m" in result


def test_dim():
    result = dim("hi")
    assert "\033[2m" in result
    assert "hi" in result


def test_color_helpers():
    assert ansi.green("ok") == f"{DEFAULT.green}ok{DEFAULT.reset}"
    assert ansi.gold("xp").startswith(DEFAULT.gold)


def test_unknown_color_raises():
    with pytest.raises(AttributeError):
        ansi.purple("nope")


def test_plain_theme_emits_no_codes(plain_theme):
    assert ansi.red("hi") == "hi"
    assert bold("hi") == "hi"


def test_strip():
    assert strip("\033[1mhello\033[0m") == "hello"
    assert strip(ansi.orange("🔥 7")) == "🔥 7"
