import pytest

from sitecms.core.errors import ValidationError
from sitecms.utils.sanitize import sanitize, sanitize_text, strip_tags, validate_email


def test_sanitize_trims_strips_and_escapes():
    assert sanitize("  <b>Hello</b> world  ") == "Hello world"
    assert sanitize('Tom & "Jerry"') == "Tom &amp; &#34;Jerry&#34;"
    assert sanitize("it's") == "it&#39;s"


def test_sanitize_removes_script_tags_but_keeps_text():
    assert sanitize("<script>alert(1)</script>") == "alert(1)"
    assert strip_tags("a<!-- note -->b") == "ab"


def test_sanitize_none_and_scalars():
    assert sanitize(None) == ""
    assert sanitize(42) == "42"


def test_sanitize_recursive_structures():
    data = {"a": " <i>x</i> ", "b": ["<p>y</p>", None], "c": ("z ",)}
    assert sanitize(data) == {"a": "x", "b": ["y", ""], "c": ("z",)}


def test_validate_email():
    assert validate_email("jane.doe@blessed.ac.ug")
    assert not validate_email("not-an-email")
    assert not validate_email("")
    assert not validate_email(None)


def test_sanitize_text_accepts_scalars_only():
    assert sanitize_text(" <i>Fees</i> ") == "Fees"
    assert sanitize_text(12) == "12"
    assert sanitize_text(None) == ""
    for bad in ({"a": 1}, ["x"], ("y",)):
        with pytest.raises(ValidationError) as exc:
            sanitize_text(bad)
        assert exc.value.message == "Invalid input data"
