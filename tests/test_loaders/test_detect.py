"""Tests for loader auto-detection."""

from hackvote.loaders import (
    detect_loader,
    detect_loader_by_content,
    get_all_loaders,
    get_supported_formats,
)
from hackvote.loaders.csv_votes import CsvVotesLoader
from hackvote.loaders.json_export import JsonExportLoader


class TestDetectLoader:
    def test_registered(self):
        loaders = get_all_loaders()
        assert JsonExportLoader in loaders
        assert CsvVotesLoader in loaders

    def test_by_name(self):
        assert isinstance(detect_loader("exports/event.json"), JsonExportLoader)
        assert isinstance(detect_loader("votes.csv"), CsvVotesLoader)

    def test_unknown_name(self):
        assert detect_loader("https://example.com/results") is None
        assert detect_loader("scores.pdf") is None

    def test_by_content(self, event_json, votes_csv, pdf_bytes):
        assert isinstance(detect_loader_by_content(event_json, "upload"), JsonExportLoader)
        assert isinstance(detect_loader_by_content(votes_csv, "upload"), CsvVotesLoader)
        assert detect_loader_by_content(pdf_bytes, "upload") is None

    def test_supported_formats(self):
        text = get_supported_formats()
        assert text.startswith("We currently support:")
        assert JsonExportLoader.FORMAT_DESCRIPTION in text
        assert CsvVotesLoader.FORMAT_DESCRIPTION in text
