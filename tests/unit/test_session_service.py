"""
Unit tests for ConfiguratorSession.

Run: pytest tests/unit/test_session_service.py -v
"""

import asyncio
import pytest
from unittest.mock import MagicMock

from config.catalog_defaults import COLOR, GLASS, MATERIAL, OPENING
from services.catalog_repository import InMemoryCatalogRepository
from services.session_service import (
    ConfiguratorSession,
    get_configurator_session,
    reset_configurator_session,
)
from exceptions import CategoryNotFoundError, DatabaseError, OptionNotFoundError
from tests.conftest import FakeExtractor


def choose_standard(session: ConfiguratorSession) -> None:
    session.select_option(MATERIAL, "pvc")
    session.select_option(OPENING, "battente")
    session.select_option(GLASS, "double")
    session.select_option(COLOR, "white")


class TestSessionSelections:
    """Tests for select_option()"""

    def test_select_existing_option(self, session):
        option = session.select_option(MATERIAL, "wood")

        assert option.id == "wood"
        assert session.quote.selections[MATERIAL].id == "wood"

    def test_unknown_category(self, session):
        with pytest.raises(CategoryNotFoundError) as exc_info:
            session.select_option("handles", "brass")

        assert exc_info.value.status_code == 404

    def test_unknown_option(self, session):
        with pytest.raises(OptionNotFoundError) as exc_info:
            session.select_option(MATERIAL, "titanium")

        assert exc_info.value.code == "OPTION_NOT_FOUND"
        assert exc_info.value.details["category_id"] == MATERIAL
        assert MATERIAL not in session.quote.selections

    def test_selection_is_a_copy(self, session):
        session.select_option(MATERIAL, "pvc")

        assert session.quote.selections[MATERIAL] == session.store.get(MATERIAL).find_option("pvc")
        assert session.quote.selections[MATERIAL] is not session.store.get(MATERIAL).find_option("pvc")

    def test_total(self, session):
        choose_standard(session)

        assert session.total() == 386


class TestSessionSummary:
    """Tests for summary()"""

    def test_initial_summary(self, session):
        summary = session.summary()

        assert summary.current_step_id == "dimensions"
        assert summary.total == 0
        assert summary.area_m2 == 1.68
        assert summary.selections == []
        assert summary.breakdown == []
        assert summary.preview.color_id == "white"
        assert summary.preview.opening_id == "battente"
        assert summary.warnings == []

    def test_future_steps_shown_once_selected(self, session):
        session.select_option(COLOR, "oak")

        summary = session.summary()

        assert [line.step_id for line in summary.selections] == [COLOR]
        assert summary.preview.color_id == "oak"

    def test_pending_current_step_listed(self, session):
        session.advance_step()

        summary = session.summary()

        assert summary.selections[0].step_id == MATERIAL
        assert summary.selections[0].option_name is None

    def test_full_summary(self, session):
        choose_standard(session)

        summary = session.summary()

        assert summary.total == 386
        assert len(summary.breakdown) == 4
        assert summary.preview.opening_id == "battente"

    def test_dimension_warnings(self, session):
        session.set_dimension("width", 600)
        session.set_dimension("height", 10)

        warnings = session.summary().warnings

        assert warnings == [
            "Width above 500 cm: check feasibility on site.",
            "Height below the 30 cm minimum.",
        ]


class TestSessionNavigation:

    def test_complete_flow(self, session):
        choose_standard(session)

        outcomes = [session.advance_step() for _ in range(5)]

        assert all(o.ok for o in outcomes)
        assert outcomes[-1].completed is True

    def test_restart(self, session):
        choose_standard(session)
        session.advance_step()

        session.restart_quote()

        assert session.summary().current_step_index == 0
        assert session.total() == 0

    def test_retreat(self, session):
        session.advance_step()

        assert session.retreat_step().step_index == 0


class TestSessionImport:
    """Tests for import_catalog() and import_status()"""

    def test_import_persists_catalog(self, session, memory_repository, pdf_bytes):
        result = asyncio.run(session.import_catalog(pdf_bytes, filename="catalogo.pdf", content_type="application/pdf"))

        assert result.success is True
        persisted = memory_repository.load()
        assert persisted[MATERIAL]["options"][0]["id"] == "pl-2001"

    def test_imported_option_selectable(self, session, pdf_bytes):
        asyncio.run(session.import_catalog(pdf_bytes))

        option = session.select_option(MATERIAL, "pl-2001")

        assert option.base_price == 72
        # 1.68 m² * 72
        assert session.total() == 121

    def test_failed_import_not_persisted(self, session, memory_repository):
        result = asyncio.run(session.import_catalog(b"not a pdf"))

        assert result.success is False
        assert memory_repository.load() is None

    def test_persist_failure_reported(self, fake_extractor, pdf_bytes):
        repository = MagicMock()
        repository.load.return_value = None
        repository.save.side_effect = DatabaseError("save", "disk full")
        session = ConfiguratorSession(repository=repository, extractor=fake_extractor)

        result = asyncio.run(session.import_catalog(pdf_bytes))

        assert result.success is True
        assert result.message.endswith("The catalog could not be saved and will be lost on restart.")

    def test_unreachable_backend_starts_with_defaults(self, fake_extractor):
        repository = MagicMock()
        repository.load.side_effect = DatabaseError("connect", "Supabase is not configured.")

        session = ConfiguratorSession(repository=repository, extractor=fake_extractor)

        assert [o.id for o in session.store.get(MATERIAL).options] == ["pvc", "wood", "alu", "alu-wood"]

    def test_import_status(self, session, pdf_bytes):
        assert session.import_status().status == "idle"

        asyncio.run(session.import_catalog(pdf_bytes))
        status = session.import_status()

        assert status.status == "success"
        assert status.busy is False
        assert status.last_result.imported == {MATERIAL: 2, OPENING: 1}

    def test_loads_persisted_catalog(self, pdf_bytes):
        repository = InMemoryCatalogRepository()
        first = ConfiguratorSession(repository=repository, extractor=FakeExtractor(items=[
            {"artCode": "TZ 9", "description": "Telaio", "weight": 500, "type": "frame"}
        ]))
        asyncio.run(first.import_catalog(pdf_bytes))

        second = ConfiguratorSession(repository=repository, extractor=FakeExtractor())

        assert second.get_category(MATERIAL).options[0].id == "tz-9"


class TestSessionReset:
    """Tests for reset_catalog()"""

    def test_reset_requires_confirmation(self, session, pdf_bytes):
        asyncio.run(session.import_catalog(pdf_bytes))

        assert session.reset_catalog(confirm=False) is False
        assert session.get_category(MATERIAL).find_option("pl-2001") is not None

    def test_reset_restores_defaults(self, session, memory_repository, pdf_bytes):
        asyncio.run(session.import_catalog(pdf_bytes))

        assert session.reset_catalog(confirm=True) is True

        assert session.get_category(MATERIAL).find_option("pl-2001") is None
        assert memory_repository.load() is None

    def test_reset_clears_orphaned_selections(self, session, pdf_bytes):
        """Selections of imported options are dropped; built-in ones survive."""
        asyncio.run(session.import_catalog(pdf_bytes))
        session.select_option(MATERIAL, "pl-2001")
        session.select_option(GLASS, "triple")
        session.advance_step()

        session.reset_catalog(confirm=True)

        assert MATERIAL not in session.quote.selections
        assert session.quote.selections[GLASS].id == "triple"
        assert session.wizard.current_step_index == 1


class TestSessionSingleton:

    def test_singleton_and_reset(self, monkeypatch):
        monkeypatch.setattr("services.session_service.build_catalog_repository", lambda: InMemoryCatalogRepository())
        reset_configurator_session()
        try:
            first = get_configurator_session()
            assert get_configurator_session() is first

            reset_configurator_session()
            assert get_configurator_session() is not first
        finally:
            reset_configurator_session()
