from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Sequence
from importlib.resources import files as resource_files

import yaml
from jsonschema import Draft202012Validator

from soulshepherd.errors import ConfigError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Boss:
    """A Stubborn Soul the player wears down with focus sessions."""

    id: int
    name: str
    initial_resolve: int
    sprite: str
    unlock_level: int
    backstory: str = ""


class BossCatalog(Sequence[Boss]):
    """Immutable, ordered boss sequence indexed 0..N-1."""

    def __init__(self, bosses: Sequence[Boss]) -> None:
        if not bosses:
            raise ConfigError("Boss catalog must contain at least one boss")
        self._bosses = tuple(bosses)

    def __len__(self) -> int:
        return len(self._bosses)

    def __getitem__(self, index):  # type: ignore[override]
        return self._bosses[index]

    def __iter__(self) -> Iterator[Boss]:
        return iter(self._bosses)

    @property
    def last_index(self) -> int:
        return len(self._bosses) - 1

    def clamp_index(self, index: int) -> int:
        return max(0, min(int(index), self.last_index))

    def get(self, index: int) -> Optional[Boss]:
        """Return the boss at index, or None when index is out of range."""
        if 0 <= index < len(self._bosses):
            return self._bosses[index]
        return None


@lru_cache(maxsize=1)
def _load_boss_schema() -> Dict[str, Any]:
    text = resource_files("soulshepherd.config").joinpath("boss.schema.json").read_text(encoding="utf-8")
    return json.loads(text)


def validate_boss_dict(data: Dict[str, Any]) -> None:
    """Validate one boss record against the boss JSON schema.

    Raises:
        ConfigError if the record is invalid.
    """
    validator = Draft202012Validator(_load_boss_schema())
    errors = sorted(validator.iter_errors(data), key=lambda e: list(e.path))
    if errors:
        for err in errors:
            logger.error("Boss schema validation error at %s: %s", list(err.path), err.message)
        raise ConfigError(f"Invalid boss record: {errors[0].message}")


def catalog_from_records(records: List[Dict[str, Any]]) -> BossCatalog:
    bosses: List[Boss] = []
    for position, record in enumerate(records):
        if not isinstance(record, dict):
            raise ConfigError(f"Boss entry {position} must be a mapping")
        validate_boss_dict(record)
        boss = Boss(**record)
        if boss.id != position:
            raise ConfigError(f"Boss id {boss.id} does not match its position {position}")
        if bosses and boss.unlock_level < bosses[-1].unlock_level:
            raise ConfigError(f"Boss {boss.name!r} unlocks before the boss preceding it")
        bosses.append(boss)
    return BossCatalog(bosses)


def load_boss_catalog(path: Optional[str] = None) -> BossCatalog:
    """Load the boss catalog from YAML.

    If path is None, loads the embedded default resource at
    soulshepherd/config/bosses.yaml.
    """
    if path is None:
        text = resource_files("soulshepherd.config").joinpath("bosses.yaml").read_text(encoding="utf-8")
        logger.debug("Loaded embedded boss catalog resource")
    else:
        try:
            text = Path(path).read_text(encoding="utf-8")
        except OSError as e:
            raise ConfigError(f"Cannot read boss catalog {path}: {e}") from e
        logger.debug("Loaded boss catalog from path: %s", path)

    try:
        raw = yaml.safe_load(text) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Boss catalog is not valid YAML: {e}") from e
    records = raw.get("bosses") if isinstance(raw, dict) else None
    if not isinstance(records, list):
        raise ConfigError("Boss catalog must define a 'bosses' list")
    catalog = catalog_from_records(records)
    logger.info("Boss catalog loaded: %d bosses", len(catalog))
    return catalog
