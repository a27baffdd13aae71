from __future__ import annotations

import asyncio
import copy
import json
import logging
import os
import re
from pathlib import Path
from typing import Any, Dict, Optional, Protocol

from soulshepherd.paths import default_data_dir, ensure_dir

logger = logging.getLogger(__name__)


class KeyValueBackend(Protocol):
    """Asynchronous, fallible key-value persistence.

    get() returns None when the key is absent. Both calls may raise on
    transient failure.
    """

    async def get(self, key: str) -> Any: ...

    async def set(self, key: str, value: Any) -> None: ...


class MemoryBackend:
    """In-process backend storing deep copies, with injectable failures.

    fail_gets / fail_sets count down: each pending failure makes the next
    call raise OSError before touching the data.
    """

    def __init__(self, initial: Optional[Dict[str, Any]] = None) -> None:
        self._data: Dict[str, Any] = copy.deepcopy(initial or {})
        self.fail_gets = 0
        self.fail_sets = 0
        self.get_calls = 0
        self.set_calls = 0

    async def get(self, key: str) -> Any:
        self.get_calls += 1
        if self.fail_gets > 0:
            self.fail_gets -= 1
            raise OSError("simulated storage read failure")
        return copy.deepcopy(self._data.get(key))

    async def set(self, key: str, value: Any) -> None:
        self.set_calls += 1
        if self.fail_sets > 0:
            self.fail_sets -= 1
            raise OSError("simulated storage write failure")
        self._data[key] = copy.deepcopy(value)

    def peek(self, key: str) -> Any:
        return copy.deepcopy(self._data.get(key))


class JsonFileBackend:
    """One pretty-printed JSON file per key under a data directory.

    Writes are atomic (temp file, fsync, replace) and keep the previous file
    as ``<key>.json.bak``. A primary file that no longer decodes falls back to
    the backup; if that fails too the raw text is returned so the state
    repair path treats it as garbage instead of erroring.
    """

    def __init__(self, root_dir: Optional[Path] = None) -> None:
        self.root_dir = ensure_dir(Path(root_dir) if root_dir else default_data_dir())

    def path_for(self, key: str) -> Path:
        safe = re.sub(r"[^A-Za-z0-9_.-]", "_", key)
        return self.root_dir / f"{safe}.json"

    async def get(self, key: str) -> Any:
        return await asyncio.to_thread(self._read, self.path_for(key))

    async def set(self, key: str, value: Any) -> None:
        text = json.dumps(value, ensure_ascii=False, sort_keys=True, indent=2)
        await asyncio.to_thread(self._atomic_write, self.path_for(key), text)

    def _read(self, path: Path) -> Any:
        bak = path.with_suffix(path.suffix + ".bak")
        if not path.exists():
            if bak.exists():
                logger.warning("Primary file %s missing; reading backup", path)
                return self._decode_or_raw(bak)
            return None
        data = path.read_bytes()
        try:
            return json.loads(data.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            logger.warning("Stored file %s is not valid JSON (%s)", path, e)
        if bak.exists():
            logger.warning("Recovering from backup %s", bak)
            return self._decode_or_raw(bak)
        return data.decode("utf-8", errors="replace")

    @staticmethod
    def _decode_or_raw(path: Path) -> Any:
        data = path.read_bytes()
        try:
            return json.loads(data.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError):
            logger.warning("Backup %s is not valid JSON either", path)
            return data.decode("utf-8", errors="replace")

    @staticmethod
    def _atomic_write(path: Path, text: str) -> None:
        tmp = path.with_suffix(path.suffix + ".tmp")
        bak = path.with_suffix(path.suffix + ".bak")
        ensure_dir(path.parent)
        with tmp.open("w", encoding="utf-8") as f:
            f.write(text)
            f.flush()
            os.fsync(f.fileno())
        if path.exists():
            os.replace(path, bak)
        os.replace(tmp, path)
        logger.debug("Wrote %s (%d bytes)", path, len(text))
