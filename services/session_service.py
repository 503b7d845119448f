"""
Configurator session.

Owns one catalog store, one quote (through the wizard controller) and one
import pipeline, and exposes the user-facing operations used by the API and
the CLI.
"""

from typing import Optional, Sequence, Union
import structlog

from config.catalog_defaults import (
    COLOR,
    DEFAULT_PREVIEW_COLOR_ID,
    DEFAULT_PREVIEW_OPENING_ID,
    OPENING,
    WIZARD_STEPS,
)
from config.settings import settings
from models.catalog import Category, Option
from models.catalog_import import ImportResult, ImportStatusResponse
from models.quote import DimensionField, PreviewParams, QuoteState, QuoteSummary, SelectionLine
from models.wizard import StepOutcome, StepType, WizardStep
from services.catalog_import_service import CatalogImportPipeline, Extractor
from services.catalog_repository import CatalogRepository, build_catalog_repository
from services.catalog_service import CatalogStore
from services.pricing_service import compute_total, price_breakdown
from services.wizard_service import WizardController
from exceptions import CategoryNotFoundError, DatabaseError, OptionNotFoundError

logger = structlog.get_logger(__name__)


class ConfiguratorSession:
    """
    One user's configuration session.

    The catalog store is created here and shared by reference with the
    wizard, the pricing functions and the import pipeline.
    """

    def __init__(
        self,
        repository: Optional[CatalogRepository] = None,
        extractor: Optional[Extractor] = None,
        steps: Sequence[WizardStep] = WIZARD_STEPS,
        store: Optional[CatalogStore] = None,
    ):
        self.repository = repository if repository is not None else build_catalog_repository()
        self.store = store if store is not None else CatalogStore.load(self.repository)
        self.wizard = WizardController(self.store, steps)
        self.importer = CatalogImportPipeline(self.store, extractor=extractor)

    @property
    def quote(self) -> QuoteState:
        return self.wizard.quote

    # ===================
    # CATALOG READS
    # ===================

    def catalog(self) -> list[Category]:
        return self.store.list_categories()

    def get_category(self, category_id: str) -> Category:
        """
        Raises:
            CategoryNotFoundError: Unknown category
        """
        category = self.store.get(category_id)
        if category is None:
            raise CategoryNotFoundError(category_id)
        return category

    # ===================
    # QUOTE OPERATIONS
    # ===================

    def set_dimension(self, field: Union[DimensionField, str], value: float) -> None:
        self.wizard.set_dimension(field, value)

    def select_option(self, category_id: str, option_id: str) -> Option:
        """
        Select an option of the current catalog by id.

        With duplicate ids the first match wins (the most recently imported).

        Raises:
            CategoryNotFoundError: Unknown category
            OptionNotFoundError: Option not in the category
        """
        category = self.get_category(category_id)
        option = category.find_option(option_id)
        if option is None:
            logger.info("option_not_found", category_id=category_id, option_id=option_id)
            raise OptionNotFoundError(category_id, option_id)

        self.wizard.select(category_id, option.model_copy(deep=True))
        return option

    def advance_step(self) -> StepOutcome:
        return self.wizard.advance()

    def retreat_step(self) -> StepOutcome:
        return self.wizard.retreat()

    def restart_quote(self) -> None:
        self.wizard.restart()

    def total(self) -> int:
        return compute_total(self.quote, self.store)

    # ===================
    # CATALOG MUTATIONS
    # ===================

    async def import_catalog(
        self,
        file_bytes: Optional[bytes],
        filename: Optional[str] = None,
        content_type: Optional[str] = None,
    ) -> ImportResult:
        """Run the import pipeline and persist the catalog if anything was merged."""
        result = await self.importer.run(file_bytes, filename=filename, content_type=content_type)
        if not result.success:
            return result

        try:
            self.store.save(self.repository)
        except DatabaseError as e:
            logger.error("catalog_persist_failed", error=e.message)
            result.message += " The catalog could not be saved and will be lost on restart."
        return result

    def import_status(self) -> ImportStatusResponse:
        return ImportStatusResponse(
            status=self.importer.status,
            busy=self.importer.is_busy,
            last_result=self.importer.last_result,
        )

    def reset_catalog(self, confirm: bool) -> bool:
        """
        Restore the built-in catalog, discarding imported options.

        Without confirmation nothing changes. Selections that point at
        options no longer in the catalog are cleared.

        Returns:
            True if the catalog was reset
        """
        if not confirm:
            logger.info("catalog_reset_cancelled")
            return False

        # Clear the persisted copy first: if that fails nothing has changed
        self.repository.clear()
        self.store.reset_to_defaults()

        cleared = self._clear_orphaned_selections()
        logger.info("catalog_reset", cleared_selections=cleared)
        return True

    def _clear_orphaned_selections(self) -> list[str]:
        cleared = []
        for category_id, option in list(self.quote.selections.items()):
            category = self.store.get(category_id)
            if category is None or option not in category.options:
                self.wizard.clear_selection(category_id)
                cleared.append(category_id)
        return cleared

    # ===================
    # SUMMARY
    # ===================

    def summary(self) -> QuoteSummary:
        """Read-side view of the quote: selections, price and preview input."""
        quote = self.quote
        current_index = self.wizard.current_step_index

        lines = []
        for index, step in enumerate(self.wizard.steps):
            if step.type != StepType.SELECTION:
                continue
            selected = quote.selections.get(step.category_id)
            # Future steps stay hidden until something is chosen for them
            if index > current_index and selected is None:
                continue
            lines.append(SelectionLine(
                step_id=step.id,
                title=step.title,
                option_id=selected.id if selected else None,
                option_name=selected.name if selected else None,
            ))

        color = quote.selections.get(COLOR)
        opening = quote.selections.get(OPENING)

        return QuoteSummary(
            width=quote.width,
            height=quote.height,
            area_m2=round(quote.area_m2, 2),
            current_step_index=current_index,
            current_step_id=self.wizard.current_step.id,
            step_count=self.wizard.step_count,
            progress_percent=self.wizard.progress_percent,
            selections=lines,
            breakdown=price_breakdown(quote, self.store),
            total=compute_total(quote, self.store),
            preview=PreviewParams(
                width=quote.width,
                height=quote.height,
                color_id=color.id if color else DEFAULT_PREVIEW_COLOR_ID,
                opening_id=opening.id if opening else DEFAULT_PREVIEW_OPENING_ID,
            ),
            warnings=self._dimension_warnings(quote),
        )

    @staticmethod
    def _dimension_warnings(quote: QuoteState) -> list[str]:
        warnings = []
        for name, value in (("Width", quote.width), ("Height", quote.height)):
            if value > settings.max_dimension_cm:
                warnings.append(
                    f"{name} above {settings.max_dimension_cm:g} cm: check feasibility on site."
                )
            elif not value >= settings.min_dimension_cm:
                warnings.append(f"{name} below the {settings.min_dimension_cm:g} cm minimum.")
        return warnings


# Singleton instance
_configurator_session: Optional[ConfiguratorSession] = None


def get_configurator_session() -> ConfiguratorSession:
    """Get or create the process-wide ConfiguratorSession."""
    global _configurator_session
    if _configurator_session is None:
        _configurator_session = ConfiguratorSession()
    return _configurator_session


def reset_configurator_session() -> None:
    """Drop the cached session (tests, config reloads)."""
    global _configurator_session
    _configurator_session = None
