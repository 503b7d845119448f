"""
Unit tests for the command line.

Run: pytest tests/unit/test_cli.py -v
"""

import json
import pytest
from unittest.mock import MagicMock

from cli import EXIT_CODES, main, parse_selection
from exceptions import DatabaseError, ExtractionError
from services.session_service import ConfiguratorSession
from tests.conftest import FakeExtractor

STANDARD = [
    "--select", "material=pvc",
    "--select", "opening=battente",
    "--select", "glass=double",
    "--select", "color=white",
]


class TestParseSelection:

    def test_valid(self):
        assert parse_selection(" material = pvc ") == ("material", "pvc")

    @pytest.mark.parametrize("raw", ["material", "=pvc", "material="])
    def test_invalid(self, raw):
        import argparse
        with pytest.raises(argparse.ArgumentTypeError):
            parse_selection(raw)


class TestConfigureCommand:

    def test_prices_complete_quote(self, session, capsys):
        code = main(["--json", "configure", "--width", "120", "--height", "140", *STANDARD], session=session)

        assert code == 0
        data = json.loads(capsys.readouterr().out)
        assert data["total"] == 386

    def test_text_output(self, session, capsys):
        code = main(["configure", *STANDARD], session=session)

        assert code == 0
        assert "386" in capsys.readouterr().out

    def test_missing_selection(self, session):
        code = main(["configure", "--select", "material=pvc"], session=session)

        assert code == EXIT_CODES["QUOTE_VALIDATION_ERROR"] == 3

    def test_invalid_dimensions(self, session):
        code = main(["configure", "--width", "10", *STANDARD], session=session)

        assert code == 3

    def test_unknown_category(self, session):
        assert main(["configure", "--select", "handles=brass"], session=session) == 4

    def test_unknown_option(self, session):
        assert main(["configure", "--select", "material=titanium"], session=session) == 5


class TestImportCommand:

    def test_import(self, session, tmp_path, pdf_bytes, capsys):
        path = tmp_path / "catalogo.pdf"
        path.write_bytes(pdf_bytes)

        code = main(["import-catalog", str(path)], session=session)

        assert code == 0
        assert "Import completed!" in capsys.readouterr().out

    def test_missing_file(self, session, tmp_path):
        assert main(["import-catalog", str(tmp_path / "missing.pdf")], session=session) == 6

    def test_not_a_pdf(self, session, tmp_path):
        path = tmp_path / "notes.txt"
        path.write_text("hello")

        assert main(["import-catalog", str(path)], session=session) == 6

    def test_extraction_failure(self, memory_repository, tmp_path, pdf_bytes):
        session = ConfiguratorSession(
            repository=memory_repository,
            extractor=FakeExtractor(error=ExtractionError("AI server error. Try again later.")),
        )
        path = tmp_path / "catalogo.pdf"
        path.write_bytes(pdf_bytes)

        assert main(["import-catalog", str(path)], session=session) == 7

    def test_no_data(self, memory_repository, tmp_path, pdf_bytes):
        session = ConfiguratorSession(repository=memory_repository, extractor=FakeExtractor(items=[]))
        path = tmp_path / "catalogo.pdf"
        path.write_bytes(pdf_bytes)

        assert main(["import-catalog", str(path)], session=session) == 9


class TestCatalogCommands:

    def test_show_catalog(self, session, capsys):
        assert main(["show-catalog", "--category", "glass"], session=session) == 0

        out = capsys.readouterr().out
        assert "double" in out
        assert "pvc" not in out

    def test_show_unknown_category(self, session):
        assert main(["show-catalog", "--category", "handles"], session=session) == 4

    def test_reset_needs_yes(self, session):
        assert main(["reset-catalog"], session=session) == 2

    def test_reset(self, session, capsys):
        assert main(["reset-catalog", "--yes"], session=session) == 0
        assert "restored" in capsys.readouterr().out

    def test_reset_storage_failure(self, fake_extractor, capsys):
        repository = MagicMock()
        repository.load.return_value = None
        repository.clear.side_effect = DatabaseError("delete", "permission denied")
        session = ConfiguratorSession(repository=repository, extractor=fake_extractor)

        assert main(["reset-catalog", "--yes"], session=session) == 10
        assert "Database delete failed" in capsys.readouterr().out
