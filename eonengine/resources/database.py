"""
Static Data Database.

Handles loading and validation of static game data tables (species,
items, quests...) from JSON files.

Layout of every data directory:
    <dir>/schemas/<name>.schema.json
    <dir>/<table>/*.json          (a single object or a list of objects)

Directories are read in the order given. Entries are keyed by "id";
a later directory (or a later file within one) overrides an earlier
entry with the same id. Entries that fail schema validation are skipped
and logged.
"""

import json
import logging
from pathlib import Path
from typing import Any, Iterable

import jsonschema

from eonengine.errors import DataLoadError


class Database:
    """
    Raw JSON table storage.

    Usage:
        db = Database("data", extra_dirs=["mods/halloween"])
        db.load_all({"items": "item.schema.json"})
        db.table("items")["potion"]
    """

    def __init__(self, data_path: Path | str, extra_dirs: Iterable[Path | str] = ()):
        self._data_path = Path(data_path)
        self._extra_dirs = [Path(d) for d in extra_dirs]
        self._schemas: dict[str, Any] = {}
        self._tables: dict[str, dict[str, Any]] = {}

        self.logger = logging.getLogger(__name__)

    @property
    def search_path(self) -> list[Path]:
        """Data directories in merge order."""
        return [self._data_path, *self._extra_dirs]

    def load_all(self, tables: dict[str, str]) -> None:
        """
        Load every table from disk.

        Args:
            tables: Table folder name -> schema file name

        Raises:
            DataLoadError: if the base data directory does not exist
        """
        if not self._data_path.is_dir():
            raise DataLoadError(f"Data directory not found: {self._data_path}")

        self._load_schemas()

        for folder, schema_name in tables.items():
            self._tables[folder] = self._load_category(folder, schema_name)

        self.logger.info(
            "Loaded " + ", ".join(f"{len(v)} {k}" for k, v in self._tables.items())
        )

    def table(self, name: str) -> dict[str, Any]:
        """Get a loaded table (empty if never loaded)."""
        return self._tables.get(name, {})

    def get(self, table: str, entry_id: str) -> dict[str, Any] | None:
        return self._tables.get(table, {}).get(entry_id)

    def _load_schemas(self) -> None:
        """Load JSON schemas (later directories may replace a schema)."""
        for data_dir in self.search_path:
            schema_dir = data_dir / "schemas"
            if not schema_dir.exists():
                continue

            for schema_file in sorted(schema_dir.glob("*.schema.json")):
                try:
                    with open(schema_file, 'r', encoding='utf-8') as f:
                        self._schemas[schema_file.name] = json.load(f)
                except (OSError, json.JSONDecodeError) as e:
                    self.logger.error(f"Failed to load schema {schema_file}: {e}")

        if not self._schemas:
            self.logger.warning(f"No schemas found under {self._data_path}")

    def _load_category(self, folder: str, schema_name: str) -> dict[str, Any]:
        """Load all JSON files of a category across the search path."""
        data_store: dict[str, Any] = {}
        schema = self._schemas.get(schema_name)
        if schema is None:
            self.logger.warning(f"No schema found for {folder} ({schema_name})")

        for data_dir in self.search_path:
            category_dir = data_dir / folder
            if not category_dir.exists():
                continue

            for file_path in sorted(category_dir.glob("*.json")):
                try:
                    with open(file_path, 'r', encoding='utf-8') as f:
                        data = json.load(f)
                except (OSError, json.JSONDecodeError) as e:
                    self.logger.error(f"Failed to load {file_path}: {e}")
                    continue

                entries = data if isinstance(data, list) else [data]
                for entry in entries:
                    if schema:
                        try:
                            jsonschema.validate(instance=entry, schema=schema)
                        except jsonschema.ValidationError as e:
                            self.logger.error(f"Validation error in {file_path}: {e.message}")
                            continue
                    if isinstance(entry, dict) and 'id' in entry:
                        if entry['id'] in data_store:
                            self.logger.debug(f"{folder}/{entry['id']} overridden by {file_path}")
                        data_store[entry['id']] = entry

        return data_store
