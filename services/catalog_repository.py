"""
Catalog persistence backends.

The catalog is stored as one key-value entry. Three backends share the
same load/save/clear contract:

- memory: process lifetime only (tests, throwaway sessions)
- file: JSON document on disk
- supabase: one row of the "settings" table
"""

import json
import os
from pathlib import Path
from typing import Any, Optional, Protocol
import structlog

from config.settings import settings
from exceptions import DatabaseError

logger = structlog.get_logger(__name__)


class CatalogRepository(Protocol):
    """Key-value boundary for the persisted catalog."""

    def load(self) -> Optional[dict[str, Any]]:
        """Return the stored catalog mapping, or None if nothing is stored."""
        ...

    def save(self, data: dict[str, Any]) -> None:
        ...

    def clear(self) -> None:
        ...


class InMemoryCatalogRepository:
    """Keeps the serialized catalog in memory."""

    def __init__(self, initial: Optional[dict[str, Any]] = None):
        self._data: Optional[str] = json.dumps(initial) if initial is not None else None

    def load(self) -> Optional[dict[str, Any]]:
        if self._data is None:
            return None
        return json.loads(self._data)

    def save(self, data: dict[str, Any]) -> None:
        self._data = json.dumps(data)

    def clear(self) -> None:
        self._data = None


class FileCatalogRepository:
    """
    Stores the catalog as a JSON file.

    Writes go to a temporary file that replaces the target, so a crash
    never leaves a half-written catalog.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def load(self) -> Optional[dict[str, Any]]:
        if not self.path.exists():
            return None

        try:
            return json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("catalog_file_unreadable", path=str(self.path), error=str(e))
            return None

    def save(self, data: dict[str, Any]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
            tmp_path.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")
            os.replace(tmp_path, self.path)
            logger.debug("catalog_file_saved", path=str(self.path))
        except OSError as e:
            logger.error("catalog_file_save_failed", path=str(self.path), error=str(e))
            raise DatabaseError("save", str(e))

    def clear(self) -> None:
        try:
            self.path.unlink(missing_ok=True)
            logger.info("catalog_file_cleared", path=str(self.path))
        except OSError as e:
            logger.error("catalog_file_clear_failed", path=str(self.path), error=str(e))
            raise DatabaseError("delete", str(e))


class SupabaseCatalogRepository:
    """
    Stores the catalog as a JSON value in the Supabase "settings" table.

    Row shape: {"key": <storage key>, "value": <json string>, "category": "catalog"}
    """

    def __init__(self, client=None, key: Optional[str] = None):
        self._client = client
        self.table = "settings"
        self.key = key or settings.catalog_storage_key

    @property
    def db(self):
        """
        Supabase client, connected on first use.

        Raises:
            DatabaseError: Supabase is not configured or unreachable
        """
        if self._client is None:
            from config.database import ConnectionError as SupabaseConnectionError, get_supabase_client
            try:
                self._client = get_supabase_client()
            except SupabaseConnectionError as e:
                raise DatabaseError("connect", str(e))
        return self._client

    def load(self) -> Optional[dict[str, Any]]:
        db = self.db
        try:
            response = (
                db.table(self.table)
                .select("key, value")
                .eq("key", self.key)
                .execute()
            )
        except Exception as e:
            logger.error("catalog_load_failed", key=self.key, error=str(e))
            raise DatabaseError("select", str(e))

        if not response.data:
            return None

        try:
            return json.loads(response.data[0]["value"])
        except (KeyError, TypeError, json.JSONDecodeError) as e:
            logger.warning("catalog_row_unreadable", key=self.key, error=str(e))
            return None

    def save(self, data: dict[str, Any]) -> None:
        db = self.db
        try:
            db.table(self.table).upsert({
                "key": self.key,
                "value": json.dumps(data, ensure_ascii=False),
                "category": "catalog",
            }).execute()
            logger.debug("catalog_row_saved", key=self.key)
        except Exception as e:
            logger.error("catalog_save_failed", key=self.key, error=str(e))
            raise DatabaseError("upsert", str(e))

    def clear(self) -> None:
        db = self.db
        try:
            db.table(self.table).delete().eq("key", self.key).execute()
            logger.info("catalog_row_cleared", key=self.key)
        except Exception as e:
            logger.error("catalog_clear_failed", key=self.key, error=str(e))
            raise DatabaseError("delete", str(e))


def build_catalog_repository(backend: Optional[str] = None) -> CatalogRepository:
    """Create the repository selected by CATALOG_BACKEND."""
    backend = backend or settings.catalog_backend

    if backend == "memory":
        return InMemoryCatalogRepository()
    if backend == "supabase":
        return SupabaseCatalogRepository()
    return FileCatalogRepository(settings.catalog_file_path)
