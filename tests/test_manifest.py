"""
Tests for remote manifest parsing.

Covers:
- Field order and download-location reconstruction
- Malformed and blank line tolerance
- Duplicate names (last occurrence wins)
- Fetch failure versus empty manifest
"""

import pytest

from pkgmgr.manifest import ArtifactRecord, load_manifest, parse_manifest, parse_record

SAMPLE_MANIFEST = """\
x64 6.0 WidgetDriver 2.3 https://example.com/w.zip
x86 5.1 Editor 1.0 https://example.com/editor.zip

x64 10.0 Toolkit 4.2 https://example.com/toolkit.zip
"""


@pytest.mark.unit
class TestParseRecord:
    def test_fields_in_order(self):
        record = parse_record("x64 6.0 WidgetDriver 2.3 https://example.com/w.zip")
        assert record == ArtifactRecord(
            name="WidgetDriver",
            version="2.3",
            download_url="https://example.com/w.zip",
            min_os_version="6.0",
            architecture="x64",
        )

    def test_download_location_with_spaces_is_rejoined(self):
        record = parse_record("x86 5.1 Odd 1.0 https://example.com/a b c.zip")
        assert record.download_url == "https://example.com/a b c.zip"

    def test_surrounding_whitespace_is_trimmed(self):
        record = parse_record("   x86 5.1 Name 1.0 http://h/f.zip\r")
        assert record.name == "Name"
        assert record.download_url == "http://h/f.zip"

    @pytest.mark.parametrize(
        "line", ["", "   ", "x64 6.0 Name 1.0", "x64", "x64 6.0 Name"]
    )
    def test_short_or_blank_lines_are_skipped(self, line):
        assert parse_record(line) is None

    def test_record_defaults(self):
        record = ArtifactRecord(name="a", version="1", download_url="u")
        assert record.min_os_version == "0.0"
        assert record.architecture == "x86"


@pytest.mark.unit
class TestParseManifest:
    def test_parses_all_valid_lines(self):
        records = parse_manifest(SAMPLE_MANIFEST)
        assert list(records) == ["WidgetDriver", "Editor", "Toolkit"]
        assert records["Toolkit"].version == "4.2"

    def test_malformed_lines_do_not_affect_neighbours(self):
        text = (
            "x64 6.0 First 1.0 https://example.com/1.zip\n"
            "broken line\n"
            "x64 6.0 Second 2.0 https://example.com/2.zip\n"
        )
        records = parse_manifest(text)
        assert set(records) == {"First", "Second"}
        assert records["Second"].download_url == "https://example.com/2.zip"

    def test_duplicate_names_last_wins(self):
        text = (
            "x86 5.1 Dup 1.0 https://example.com/old.zip\n"
            "x64 6.1 Dup 2.0 https://example.com/new.zip\n"
        )
        records = parse_manifest(text)
        assert len(records) == 1
        assert records["Dup"].version == "2.0"
        assert records["Dup"].architecture == "x64"

    def test_windows_line_endings(self):
        records = parse_manifest("x86 5.1 A 1 http://h/a.zip\r\nx86 5.1 B 2 http://h/b.zip\r\n")
        assert records["A"].download_url == "http://h/a.zip"
        assert records["B"].version == "2"

    @pytest.mark.parametrize("text", ["", "\n\n", "only three tokens\n"])
    def test_empty_or_malformed_manifest_gives_empty_mapping(self, text):
        assert parse_manifest(text) == {}

    def test_parsing_is_idempotent(self):
        assert parse_manifest(SAMPLE_MANIFEST) == parse_manifest(SAMPLE_MANIFEST)


@pytest.mark.unit
class TestLoadManifest:
    def test_fetch_failure_returns_none(self):
        assert load_manifest("https://example.com/m.txt", lambda url: None) is None

    def test_empty_body_returns_empty_mapping(self):
        result = load_manifest("https://example.com/m.txt", lambda url: "")
        assert result == {}
        assert result is not None

    def test_passes_url_to_fetcher(self):
        seen = []

        def fetch(url):
            seen.append(url)
            return SAMPLE_MANIFEST

        records = load_manifest("https://example.com/m.txt", fetch)
        assert seen == ["https://example.com/m.txt"]
        assert "Editor" in records
