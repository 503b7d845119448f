"""
Business logic services.

Each service handles one domain area.
"""

from services.catalog_repository import (
    CatalogRepository,
    InMemoryCatalogRepository,
    FileCatalogRepository,
    SupabaseCatalogRepository,
    build_catalog_repository,
)
from services.catalog_service import CatalogStore
from services.pricing_service import compute_total, price_breakdown
from services.wizard_service import WizardController, new_quote
from services.claude_extraction_service import ClaudeExtractionService, get_claude_extraction_service
from services.catalog_import_service import CatalogImportPipeline
from services.session_service import (
    ConfiguratorSession,
    get_configurator_session,
    reset_configurator_session,
)

__all__ = [
    "CatalogRepository",
    "InMemoryCatalogRepository",
    "FileCatalogRepository",
    "SupabaseCatalogRepository",
    "build_catalog_repository",
    "CatalogStore",
    "compute_total",
    "price_breakdown",
    "WizardController",
    "new_quote",
    "ClaudeExtractionService",
    "get_claude_extraction_service",
    "CatalogImportPipeline",
    "ConfiguratorSession",
    "get_configurator_session",
    "reset_configurator_session",
]
