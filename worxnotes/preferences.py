"""
Device-local preferences.

Only the last technician name is remembered. A ``tech`` query parameter wins
over the stored value and replaces it.
"""
import json
import logging
from pathlib import Path
from typing import Mapping, Optional

logger = logging.getLogger(__name__)

TECHNICIAN_KEY = "autotech_technician"
TECH_QUERY_PARAM = "tech"


class PreferenceStore:
    def __init__(self, path: str | Path):
        self.path = Path(path)

    def _load(self) -> dict:
        try:
            return json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return {}
        except (OSError, ValueError) as exc:
            logger.warning("Ignoring unreadable preferences file %s: %s", self.path, exc)
            return {}

    def _save(self, data: dict) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(data, indent=2), encoding="utf-8")

    def get_technician_name(self, query_params: Optional[Mapping[str, str]] = None) -> str:
        from_url = (query_params or {}).get(TECH_QUERY_PARAM)
        if from_url:
            self.save_technician_name(from_url)
            return from_url
        return self._load().get(TECHNICIAN_KEY) or ""

    def save_technician_name(self, name: str) -> None:
        data = self._load()
        data[TECHNICIAN_KEY] = name
        self._save(data)
