from __future__ import annotations

from pathlib import Path

from buildIndexFile import extract_title, read_title, resolve_title, slug_to_label


def _write(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8", newline="\n")


def test_extract_title_is_case_insensitive_and_spans_lines() -> None:
    text = '<html><head><TITLE lang="en">\n  Hello\n  World  </TITLE></head></html>'
    lookup = extract_title(text)
    assert lookup.found
    assert lookup.title == "Hello\n  World"


def test_extract_title_takes_the_first_element() -> None:
    lookup = extract_title("<title>One</title><title>Two</title>")
    assert lookup.title == "One"


def test_extract_title_reports_missing_and_blank_titles() -> None:
    missing = extract_title("<html><body>no head</body></html>")
    blank = extract_title("<title>   \n </title>")

    assert not missing.found
    assert missing.reason == "no <title> element"
    assert not blank.found
    assert blank.reason == "empty <title>"


def test_read_title_absorbs_missing_file(tmp_path: Path) -> None:
    lookup = read_title(str(tmp_path / "nope.html"))
    assert lookup.title is None
    assert lookup.reason.startswith("unreadable")


def test_read_title_keeps_title_of_page_with_stray_bytes(tmp_path: Path) -> None:
    page = tmp_path / "latin.html"
    page.write_bytes(b"<html><head><title>Caf\xe9 menu</title></head></html>")

    lookup = read_title(str(page))
    assert lookup.found
    assert lookup.title == "Caf\ufffd menu"


def test_slug_to_label_strips_suffix_and_separators() -> None:
    assert slug_to_label("my-page_v1.2.HTML") == "my page v1 2"
    assert slug_to_label("b.HTML") == "b"
    assert slug_to_label("../getting_started.html") == "getting started"


def test_resolve_title_prefers_title_element_over_filename(tmp_path: Path) -> None:
    out_dir = tmp_path / "docs"
    _write(out_dir / "release-notes.html", "<title>Foo</title>")

    assert resolve_title("release-notes.html", str(out_dir), str(tmp_path)) == "Foo"


def test_resolve_title_falls_back_to_working_directory(tmp_path: Path) -> None:
    out_dir = tmp_path / "docs"
    out_dir.mkdir()
    _write(tmp_path / "about.html", "<title>About us</title>")

    assert resolve_title("about.html", str(out_dir), str(tmp_path)) == "About us"


def test_resolve_title_uses_filename_when_title_missing_everywhere(tmp_path: Path) -> None:
    out_dir = tmp_path / "docs"
    _write(out_dir / "user_guide.html", "<html><body>plain</body></html>")
    _write(tmp_path / "user_guide.html", "<title>  </title>")

    assert resolve_title("user_guide.html", str(out_dir), str(tmp_path)) == "user guide"
