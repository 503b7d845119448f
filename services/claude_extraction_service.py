"""
Claude extraction service for supplier catalog PDFs.

Sends the PDF to Claude as a base64 document and forces a tool call whose
input schema is the catalog row array, so the answer arrives as structured
JSON. Rows are returned raw; validation happens in the import pipeline.
"""

import json
import re
from typing import Any, Optional
import anthropic
import structlog

from config.settings import settings
from models.catalog_import import ExtractionResult
from exceptions import ExtractionError, NoDataFoundError

logger = structlog.get_logger(__name__)


ROW_TYPES = ["frame", "sash", "other"]

EXTRACTION_TOOL = {
    "name": "record_catalog_items",
    "description": "Record the window profiles found in the catalog.",
    "input_schema": {
        "type": "object",
        "properties": {
            "items": {
                "type": "array",
                "items": {
                    "type": "object",
                    "properties": {
                        "artCode": {"type": "string", "description": "Article code (e.g., PL 2001)"},
                        "description": {"type": "string", "description": "Short description"},
                        "weight": {"type": "number", "description": "Weight in gr/m"},
                        "type": {
                            "type": "string",
                            "description": "'frame' for Telaio, 'sash' for Anta, else 'other'",
                            "enum": ROW_TYPES,
                        },
                    },
                    "required": ["artCode", "description", "weight", "type"],
                },
            }
        },
        "required": ["items"],
    },
}


class ClaudeExtractionService:
    """
    Extract profile rows from window catalog PDFs using Claude.

    Failures are raised as ExtractionError with a cause the UI can show:
    configuration, transient or unreadable_input.
    """

    SYSTEM_PROMPT = """You read window and door manufacturer catalogs and extract profile data.

Find the technical data tables (often titled "ELENCO PROFILI").
Extract 10-20 main profiles: frames (Telai) and sashes (Ante).

For each profile record:
- artCode: the article code exactly as printed (e.g. PL 2001)
- description: short description
- weight: weight in gr/m (number only)
- type: 'frame' if it is a Telaio, 'sash' if it is an Anta, else 'other'

Always answer by calling the record_catalog_items tool."""

    USER_PROMPT = "Analyze this window catalog PDF and record its main profiles."

    def __init__(
        self,
        api_key: Optional[str] = None,
        client: Optional[Any] = None,
        model: Optional[str] = None,
        max_tokens: Optional[int] = None,
    ):
        """Initialize the extraction service (no client without an API key)."""
        self.api_key = api_key if api_key is not None else settings.anthropic_api_key
        self.model = model or settings.extraction_model
        self.max_tokens = max_tokens or settings.extraction_max_tokens

        if client is not None:
            self.client = client
        elif self.api_key and self.api_key.strip():
            self.client = anthropic.AsyncAnthropic(api_key=self.api_key)
        else:
            self.client = None

    @property
    def available(self) -> bool:
        return self.client is not None

    async def extract(self, pdf_base64: str) -> ExtractionResult:
        """
        Send a base64 PDF to Claude and return the raw item list.

        Args:
            pdf_base64: PDF content, base64 encoded

        Returns:
            ExtractionResult with unvalidated item dicts

        Raises:
            ExtractionError: Configuration, transport or unreadable-input failure
            NoDataFoundError: The response contained no parseable item list
        """
        if not self.available:
            raise ExtractionError(
                "Configuration error: the AI API key is missing. Set ANTHROPIC_API_KEY.",
                cause="configuration"
            )

        logger.info("claude_extraction_started", payload_chars=len(pdf_base64), model=self.model)

        try:
            response = await self.client.messages.create(
                model=self.model,
                max_tokens=self.max_tokens,
                system=self.SYSTEM_PROMPT,
                tools=[EXTRACTION_TOOL],
                tool_choice={"type": "tool", "name": EXTRACTION_TOOL["name"]},
                messages=[{
                    "role": "user",
                    "content": [
                        {
                            "type": "document",
                            "source": {
                                "type": "base64",
                                "media_type": "application/pdf",
                                "data": pdf_base64
                            }
                        },
                        {
                            "type": "text",
                            "text": self.USER_PROMPT
                        }
                    ]
                }]
            )
        except (anthropic.AuthenticationError, anthropic.PermissionDeniedError) as e:
            logger.error("claude_auth_failed", error=str(e))
            raise ExtractionError(
                "Configuration error: the AI API key was rejected.",
                cause="configuration"
            )
        except anthropic.BadRequestError as e:
            logger.error("claude_request_rejected", error=str(e))
            raise ExtractionError(
                "AI request rejected (400). The PDF may be corrupt or unreadable.",
                cause="unreadable_input"
            )
        except anthropic.APIConnectionError as e:
            logger.error("claude_connection_failed", error=str(e))
            raise ExtractionError(
                "The AI service could not be reached. Try again later.",
                cause="transient"
            )
        except anthropic.APIStatusError as e:
            logger.error("claude_api_error", status_code=e.status_code, error=str(e))
            if e.status_code in (413, 422):
                raise ExtractionError(
                    "The AI service could not read this PDF.",
                    cause="unreadable_input",
                    details={"status_code": e.status_code}
                )
            raise ExtractionError(
                "AI server error. Try again later.",
                cause="transient",
                details={"status_code": e.status_code}
            )
        except anthropic.APIError as e:
            logger.error("claude_extraction_failed", error=str(e))
            raise ExtractionError("AI extraction failed. Try again later.", cause="transient")

        result = self._parse_claude_response(response)
        logger.info("claude_extraction_completed", items=len(result.items))
        return result

    def _parse_claude_response(self, response: Any) -> ExtractionResult:
        """
        Pull the item list out of Claude's response.

        Prefers the forced tool call; falls back to JSON in a text block.

        Raises:
            NoDataFoundError: Nothing parseable in the response
        """
        payload: Optional[Any] = None
        texts: list[str] = []

        for block in getattr(response, "content", None) or []:
            block_type = getattr(block, "type", None)
            if block_type == "tool_use":
                payload = getattr(block, "input", None)
                break
            if block_type == "text":
                texts.append(getattr(block, "text", "") or "")

        if payload is None and texts:
            payload = self._parse_json_text("\n".join(texts))

        if not isinstance(payload, dict) or not isinstance(payload.get("items"), list):
            logger.warning("claude_response_unparseable", stop_reason=getattr(response, "stop_reason", None))
            raise NoDataFoundError(
                "No response from the AI. Try again, or the PDF may not be readable."
            )

        items = [item for item in payload["items"] if isinstance(item, dict)]
        dropped = len(payload["items"]) - len(items)
        if dropped:
            logger.warning("claude_items_not_objects", dropped=dropped)

        return ExtractionResult(items=items)

    @staticmethod
    def _parse_json_text(text: str) -> Optional[Any]:
        """Parse JSON text, tolerating markdown code fences."""
        cleaned = text.strip()
        if cleaned.startswith("```"):
            # Remove ```json and ``` markers
            cleaned = re.sub(r'^```(?:json)?\s*', '', cleaned)
            cleaned = re.sub(r'\s*```$', '', cleaned)

        try:
            return json.loads(cleaned)
        except json.JSONDecodeError as e:
            logger.error("json_parse_failed", response_preview=text[:500], error=str(e))
            return None


# Singleton instance
_claude_extraction: Optional[ClaudeExtractionService] = None


def get_claude_extraction_service() -> ClaudeExtractionService:
    """Get or create ClaudeExtractionService instance."""
    global _claude_extraction
    if _claude_extraction is None:
        _claude_extraction = ClaudeExtractionService()
    return _claude_extraction
