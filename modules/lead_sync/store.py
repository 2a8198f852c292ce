"""
Mapping store for Lead Sync module.

Persists the lead id → LeadMapping table as a single JSON document.
The whole document is rewritten on every save.
"""

import json
import logging
import threading
from pathlib import Path
from typing import Optional

from .config import config
from .models import LeadMapping

logger = logging.getLogger(__name__)

MappingTable = dict[str, LeadMapping]


class MappingStore:
    """Owns the live mapping table and its snapshot file."""

    def __init__(self, path: Optional[Path] = None):
        self.path = Path(path) if path else config.MAPPING_PATH
        self._lock = threading.Lock()
        self._table: MappingTable = self.load()

    def load(self) -> MappingTable:
        """
        Read the persisted snapshot.

        A missing or unreadable file yields an empty table; this never raises.
        """
        if not self.path.exists():
            logger.info(f"No mapping snapshot at {self.path}, starting empty")
            return {}

        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
            raw = data.get('mappings', {}) if isinstance(data, dict) else {}
            table = {
                str(lead_id): LeadMapping.from_dict(str(lead_id), entry)
                for lead_id, entry in raw.items()
                if isinstance(entry, dict)
            }
        except (OSError, ValueError, AttributeError, TypeError) as e:
            logger.warning(f"Could not read mapping snapshot {self.path}: {e}; starting empty")
            return {}

        logger.info(f"Loaded {len(table)} lead mappings from {self.path}")
        return table

    def current(self) -> MappingTable:
        """The live table (not a copy); in-process mutations are visible immediately."""
        return self._table

    def get(self, lead_id: str) -> Optional[LeadMapping]:
        return self._table.get(lead_id)

    def save(self, table: Optional[MappingTable] = None):
        """Serialize the entire table and overwrite the snapshot."""
        table = self._table if table is None else table
        document = {
            'mappings': {lead_id: mapping.to_dict() for lead_id, mapping in table.items()}
        }

        with self._lock:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, 'w', encoding='utf-8') as f:
                json.dump(document, f, indent=2)

        logger.debug(f"Saved {len(table)} lead mappings to {self.path}")

    def __len__(self) -> int:
        return len(self._table)


# Module-level instance
mapping_store = MappingStore()
