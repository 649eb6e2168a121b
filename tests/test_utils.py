from covidlist.models import ListingError
from covidlist.utils import (
    build_lines,
    expand_entry,
    extract_entries,
    normalize_entry,
    publish,
    write_lines,
)

import pytest


def test_normalize_entry_wildcard():
    assert normalize_entry("*.evil.org") == "www.evil.org"


def test_normalize_entry_escaped_space():
    assert normalize_entry("203.0.113.5\\032evil.org") == "evil.org"
    assert normalize_entry("evil.org\\032") == "evil.org"


def test_normalize_entry_legal_unchanged():
    assert normalize_entry("evil.org") == "evil.org"
    assert normalize_entry("site123.org") == "site123.org"
    # pas de frontière de mot: seul le marqueur disparaît
    assert normalize_entry("site123\\032.org") == "site123.org"


def test_expand_entry_prefixes():
    assert expand_entry("evil.org") == ["evil.org"]
    assert expand_entry("evil.org", with_prefixes=True) == [
        "evil.org",
        "http://evil.org",
        "https://evil.org",
    ]


def test_build_lines_keeps_order():
    lines = build_lines(["*.a.com", "b.com"], with_prefixes=True)
    assert lines == [
        "www.a.com", "http://www.a.com", "https://www.a.com",
        "b.com", "http://b.com", "https://b.com",
    ]


def test_extract_entries_filters_virus_and_dedupes(tmp_path):
    p = tmp_path / "covid-2020-03-15.csv"
    p.write_text(
        "Query,Match,Date\n"
        "virus,bad.com,2020-03-15\n"
        "other,bad.com,2020-03-15\n"
        "other,evil.org,2020-03-15\n",
        encoding="utf-8",
    )
    assert extract_entries(p) == ["bad.com", "evil.org"]


def test_extract_entries_missing_columns(tmp_path):
    p = tmp_path / "covid.csv"
    p.write_text("domain\nbad.com\n", encoding="utf-8")
    with pytest.raises(ListingError):
        extract_entries(p)


def test_write_lines_replaces_previous_file(tmp_path):
    p = tmp_path / "out.txt"
    p.write_text("stale\n", encoding="utf-8")
    assert write_lines(p, ["a.com", "b.com"]) == 2
    assert p.read_text(encoding="utf-8") == "a.com\nb.com\n"


def test_write_lines_empty(tmp_path):
    p = tmp_path / "out.txt"
    assert write_lines(p, []) == 0
    assert p.read_text(encoding="utf-8") == ""


def test_publish_round_trip(tmp_path):
    src = tmp_path / "tmp.txt"
    write_lines(src, ["evil.org", "http://evil.org", "https://evil.org"])
    dest = publish(src, tmp_path / "final.txt")
    assert dest.read_text(encoding="utf-8").splitlines() == src.read_text(encoding="utf-8").splitlines()


def test_publish_existing_destination(tmp_path):
    src = tmp_path / "tmp.txt"
    write_lines(src, ["new.org"])
    dest = tmp_path / "final.txt"
    dest.write_text("old.org\n", encoding="utf-8")
    with pytest.raises(FileExistsError):
        publish(src, dest)
    assert dest.read_text(encoding="utf-8") == "old.org\n"
    publish(src, dest, overwrite=True)
    assert dest.read_text(encoding="utf-8") == "new.org\n"


def test_extract_entries_utf8_bom(tmp_path):
    p = tmp_path / "covid-bom.csv"
    p.write_bytes(b"\xef\xbb\xbfQuery,Match\nother,evil.org\n")
    assert extract_entries(p) == ["evil.org"]


def test_extract_entries_invalid_bytes(tmp_path):
    p = tmp_path / "covid-latin1.csv"
    p.write_bytes(b"Query,Match\nother,\xe9vil.org\n")
    with pytest.raises(ListingError):
        extract_entries(p)


def test_publish_missing_destination_dir(tmp_path):
    src = tmp_path / "tmp.txt"
    write_lines(src, ["evil.org"])
    with pytest.raises(FileNotFoundError):
        publish(src, tmp_path / "absent" / "final.txt")
