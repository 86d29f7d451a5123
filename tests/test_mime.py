import pytest

from camstream.mime import guess_mime_type


@pytest.mark.parametrize(
    ("path", "expected"),
    [
        ("/index.html", "text/html"),
        ("page.htm", "text/html"),
        ("/static/style.css", "text/css"),
        ("app.js", "text/javascript"),
        ("photo.jpg", "image/jpeg"),
        ("photo.jpeg", "image/jpeg"),
        ("favicon.ico", "image/x-icon"),
        ("drawing.svg", "image/svg+xml"),
        ("lib.jar", "application/java-archive"),
        ("data.json", "application/json"),
    ],
)
def test_known_extensions(path, expected):
    assert guess_mime_type(path) == expected


def test_extension_is_case_insensitive():
    assert guess_mime_type("/INDEX.HTML") == guess_mime_type("/index.html")
    assert guess_mime_type("x.PnG") == "image/png"


@pytest.mark.parametrize(
    "path",
    ["/noext", "/dir.d/file", "archive.tar.xz", "trailing.", ""],
)
def test_unknown_falls_back(path):
    assert guess_mime_type(path) == "application/misc"


def test_last_dot_decides():
    assert guess_mime_type("/a.png/b.gif") == "image/gif"