"""
Catalog import pipeline.

Turns one supplier PDF into catalog merges:

    input checks -> reading (base64) -> analyzing (extraction)
    -> classify & price -> merge into "material" (frames) / "opening" (sashes)

Only one import runs at a time. Every failure is converted into an
ImportResult at this boundary; nothing is merged unless extraction and
classification succeeded. The two merges are independent, so one failing
does not undo the other.
"""

import asyncio
import base64
import binascii
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Optional, Protocol
from urllib.parse import quote
import structlog
from pydantic import ValidationError as PydanticValidationError

from config.catalog_defaults import FRAME_CATEGORY, SASH_CATEGORY
from config.settings import settings
from models.base import ErrorDetail
from models.catalog import MergeOutcome, Option
from models.catalog_import import ExtractionResult, ImportResult, ImportRow, ImportStatus
from services.catalog_service import CatalogStore
from services.claude_extraction_service import get_claude_extraction_service
from services.pricing_service import round_half_up
from utils.text_utils import slugify_art_code
from exceptions import (
    AppError,
    ExtractionError,
    ImportInProgressError,
    ImportInputError,
    NoDataFoundError,
)

logger = structlog.get_logger(__name__)

PDF_SIGNATURE = b"%PDF-"
PDF_CONTENT_TYPES = {"application/pdf", "application/x-pdf"}
PLACEHOLDER_IMAGE_URL = "https://placehold.co/400x300/e2e8f0/1e293b?text={code}"

StatusListener = Callable[[ImportStatus], None]


class Extractor(Protocol):
    """Anything that turns a base64 PDF into raw catalog rows."""

    async def extract(self, pdf_base64: str) -> ExtractionResult:
        ...


@dataclass
class ClassifiedRows:
    """Options grouped by target category, plus what was left out."""
    groups: dict[str, list[Option]] = field(default_factory=dict)
    rejected: int = 0
    skipped: int = 0

    @property
    def option_count(self) -> int:
        return sum(len(options) for options in self.groups.values())


class CatalogImportPipeline:
    """
    Import entry point for one session.

    Status moves idle -> reading -> analyzing -> success|error. While reading
    or analyzing, new uploads are rejected; after success or error the
    pipeline accepts a new upload.
    """

    def __init__(
        self,
        store: CatalogStore,
        extractor: Optional[Extractor] = None,
        max_size_bytes: Optional[int] = None,
        cost_per_kg: Optional[float] = None,
        frame_multiplier: Optional[float] = None,
        sash_multiplier: Optional[float] = None,
        timeout_seconds: Optional[float] = None,
    ):
        self.store = store
        self.extractor = extractor if extractor is not None else get_claude_extraction_service()
        self.max_size_bytes = max_size_bytes or settings.max_import_size_bytes
        self.cost_per_kg = cost_per_kg or settings.cost_per_kg
        self.multipliers = {
            "frame": frame_multiplier or settings.frame_multiplier,
            "sash": sash_multiplier or settings.sash_multiplier,
        }
        self.targets = {
            "frame": FRAME_CATEGORY,
            "sash": SASH_CATEGORY,
        }
        self.timeout_seconds = timeout_seconds if timeout_seconds is not None else settings.import_timeout_seconds

        self._status = ImportStatus.IDLE
        self._listeners: list[StatusListener] = []
        self.last_result: Optional[ImportResult] = None

    # ===================
    # STATUS
    # ===================

    @property
    def status(self) -> ImportStatus:
        return self._status

    @property
    def is_busy(self) -> bool:
        return self._status.is_busy

    def subscribe(self, listener: StatusListener) -> None:
        """Register a callback for every status transition."""
        self._listeners.append(listener)

    def _set_status(self, status: ImportStatus) -> None:
        self._status = status
        logger.debug("catalog_import_status", status=status.value)
        for listener in self._listeners:
            try:
                listener(status)
            except Exception as e:
                logger.error("catalog_import_listener_failed", status=status.value, error=str(e))

    # ===================
    # STAGES
    # ===================

    def validate_input(
        self,
        payload: Optional[bytes],
        content_type: Optional[str] = None,
    ) -> None:
        """
        Reject anything that is not a PDF within the size limit.

        Raises:
            ImportInputError: Empty, oversized or non-PDF payload
        """
        if content_type:
            media_type = content_type.split(";")[0].strip().lower()
            if media_type not in PDF_CONTENT_TYPES:
                raise ImportInputError(
                    "The file must be a PDF.",
                    details={"content_type": content_type}
                )

        if not payload:
            raise ImportInputError("The uploaded file is empty.")

        if len(payload) > self.max_size_bytes:
            size_mb = len(payload) / 1024 / 1024
            limit_mb = self.max_size_bytes / 1024 / 1024
            raise ImportInputError(
                f"File too large ({size_mb:.1f}MB). The limit is {limit_mb:g}MB.",
                details={"size_bytes": len(payload), "max_bytes": self.max_size_bytes}
            )

        if not bytes(payload[:1024]).lstrip().startswith(PDF_SIGNATURE):
            raise ImportInputError(
                "The file must be a PDF.",
                details={"reason": "missing %PDF signature"}
            )

    @staticmethod
    def encode_payload(payload: bytes) -> str:
        """
        Base64-encode the PDF for transport.

        Raises:
            ImportInputError: Payload cannot be read as bytes
        """
        try:
            return base64.b64encode(bytes(payload)).decode("ascii")
        except (TypeError, ValueError, binascii.Error) as e:
            raise ImportInputError("Could not read the file.", details={"error": str(e)})

    def estimate_price(self, weight: float, row_type: str) -> int:
        """Estimated price: (weight gr/m / 1000) * cost per kg * assembly multiplier."""
        return round_half_up((weight / 1000) * self.cost_per_kg * self.multipliers[row_type])

    def build_option(self, row: ImportRow) -> Option:
        """Map a validated row to a catalog option."""
        option_id = slugify_art_code(row.art_code)
        if option_id is None:
            raise ValueError(f"article code '{row.art_code}' gives an empty id")

        return Option(
            id=option_id,
            name=f"{row.art_code} - {row.description}",
            description=f"Weight: {row.weight:g} gr/m.",
            image_url=PLACEHOLDER_IMAGE_URL.format(code=quote(row.art_code)),
            base_price=self.estimate_price(row.weight, row.type),
            price_multiplier=1.0,
            code=row.art_code,
            weight=row.weight,
            category_type=row.type,
        )

    def classify_rows(self, items: Iterable[dict[str, Any]]) -> ClassifiedRows:
        """
        Validate raw rows and group the resulting options by category.

        Rows missing required fields are rejected; rows of type "other"
        are skipped.
        """
        classified = ClassifiedRows()

        for index, raw in enumerate(items):
            try:
                row = ImportRow.model_validate(raw)
            except PydanticValidationError as e:
                classified.rejected += 1
                logger.warning(
                    "catalog_row_rejected",
                    row=index,
                    errors=[err["loc"] for err in e.errors()]
                )
                continue

            target = self.targets.get(row.type)
            if target is None:
                classified.skipped += 1
                continue

            try:
                option = self.build_option(row)
            except (ValueError, OverflowError) as e:
                classified.rejected += 1
                logger.warning("catalog_row_rejected", row=index, error=str(e))
                continue

            classified.groups.setdefault(target, []).append(option)

        return classified

    def merge(self, groups: dict[str, list[Option]]) -> list[MergeOutcome]:
        """One merge per non-empty group; failures do not affect other groups."""
        return [
            self.store.merge_import(category_id, options)
            for category_id, options in groups.items()
            if options
        ]

    async def _extract(self, encoded: str) -> ExtractionResult:
        if not self.timeout_seconds:
            return await self.extractor.extract(encoded)

        try:
            return await asyncio.wait_for(self.extractor.extract(encoded), timeout=self.timeout_seconds)
        except asyncio.TimeoutError:
            raise ExtractionError(
                "The AI took too long to read the catalog. Try again later.",
                cause="transient",
                details={"timeout_seconds": self.timeout_seconds}
            )

    # ===================
    # ENTRY POINT
    # ===================

    async def run(
        self,
        payload: Optional[bytes],
        filename: Optional[str] = None,
        content_type: Optional[str] = None,
    ) -> ImportResult:
        """
        Import one catalog PDF.

        Args:
            payload: File content
            filename: Original file name (for messages and logs)
            content_type: MIME type reported by the upload, if any

        Returns:
            ImportResult; errors are reported in it, never raised. A cancelled
            run still propagates the cancellation after moving to error.
        """
        if self.is_busy:
            error = ImportInProgressError(self._status.value)
            logger.warning("catalog_import_rejected_busy", filename=filename, status=self._status.value)
            return ImportResult(
                success=False,
                status=self._status,
                message=error.message,
                filename=filename,
                error=ErrorDetail.from_error(error),
            )

        try:
            return await self._run(payload, filename, content_type)
        finally:
            # Cancellation or a crash mid-run must not leave the pipeline busy
            if self.is_busy:
                logger.error("catalog_import_interrupted", filename=filename, status=self._status.value)
                self._fail(ExtractionError("Import interrupted.", cause="transient"), filename)

    async def _run(
        self,
        payload: Optional[bytes],
        filename: Optional[str],
        content_type: Optional[str],
    ) -> ImportResult:
        logger.info(
            "catalog_import_started",
            filename=filename,
            content_type=content_type,
            size_bytes=len(payload) if payload else 0
        )

        try:
            self.validate_input(payload, content_type)
        except ImportInputError as e:
            return self._fail(e, filename)

        self._set_status(ImportStatus.READING)
        try:
            encoded = self.encode_payload(payload)

            self._set_status(ImportStatus.ANALYZING)
            extraction = await self._extract(encoded)

            if not extraction.items:
                raise NoDataFoundError()

            classified = self.classify_rows(extraction.items)
            if not classified.groups:
                raise NoDataFoundError(
                    "No frame or sash profiles found in the PDF.",
                    details={"rejected_rows": classified.rejected, "skipped_rows": classified.skipped}
                )
        except AppError as e:
            return self._fail(e, filename)
        except Exception as e:
            logger.error("catalog_import_unexpected_error", filename=filename, error=str(e), error_type=type(e).__name__)
            return self._fail(ExtractionError("Unknown error during import.", cause="transient"), filename)

        merges = self.merge(classified.groups)
        imported = {outcome.category_id: outcome.added for outcome in merges if outcome.success}
        failed = [outcome for outcome in merges if not outcome.success]

        if not imported:
            first_error = failed[0].error
            result = ImportResult(
                success=False,
                status=ImportStatus.ERROR,
                message=first_error.message,
                filename=filename,
                rejected_rows=classified.rejected,
                skipped_rows=classified.skipped,
                merges=merges,
                error=first_error,
            )
            logger.error("catalog_import_merge_failed", filename=filename, categories=[o.category_id for o in failed])
            return self._finish(result)

        added = ", ".join(f"{count} in {category_id}" for category_id, count in imported.items())
        message = f"Import completed! New products added: {added}."
        if failed:
            message += " Not imported: " + ", ".join(o.error.message for o in failed) + "."

        result = ImportResult(
            success=True,
            status=ImportStatus.SUCCESS,
            message=message,
            filename=filename,
            imported=imported,
            rejected_rows=classified.rejected,
            skipped_rows=classified.skipped,
            merges=merges,
        )
        logger.info(
            "catalog_import_completed",
            filename=filename,
            imported=imported,
            rejected_rows=classified.rejected,
            skipped_rows=classified.skipped,
            failed_merges=len(failed)
        )
        return self._finish(result)

    def _fail(self, error: AppError, filename: Optional[str]) -> ImportResult:
        logger.error(
            "catalog_import_failed",
            filename=filename,
            code=error.code,
            cause=error.details.get("cause"),
            error=error.message
        )
        return self._finish(ImportResult(
            success=False,
            status=ImportStatus.ERROR,
            message=error.message,
            filename=filename,
            error=ErrorDetail.from_error(error),
        ))

    def _finish(self, result: ImportResult) -> ImportResult:
        self.last_result = result
        self._set_status(result.status)
        return result
