from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Mapping, Optional

from soulshepherd.errors import StateNotLoadedError, StorageError
from soulshepherd.notify import Notifier, ToastNotifier
from .backends import KeyValueBackend
from .retry import RetryPolicy, Sleep, retry_async
from .schema import SECTIONS, StateSchema

logger = logging.getLogger(__name__)

STORAGE_KEY = "soul_shepherd.game_state"


class StateStore:
    """Single owner of the in-memory root state and its persisted copy.

    - load_state() reads, repairs and adopts the stored state; it never raises
    - save_state() persists the whole aggregate or raises StorageError
    - update_state() shallow-merges whole sections and saves

    Not safe for concurrent writers: callers serialize update_state() calls.
    """

    NOTICE_LOAD_FAILED = "Failed to load saved progress. Starting fresh."
    NOTICE_SAVE_FAILED = "Failed to save progress. Your changes may be lost."

    def __init__(
        self,
        backend: KeyValueBackend,
        schema: Optional[StateSchema] = None,
        notifier: Optional[Notifier] = None,
        policy: Optional[RetryPolicy] = None,
        *,
        key: str = STORAGE_KEY,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self.backend = backend
        self.schema = schema or StateSchema()
        self.notifier = notifier or ToastNotifier()
        self.policy = policy or RetryPolicy()
        self.key = key
        self._sleep = sleep
        self._state: Optional[Dict[str, Any]] = None

    @property
    def is_loaded(self) -> bool:
        return self._state is not None

    async def load_state(self) -> Dict[str, Any]:
        try:
            stored = await retry_async(
                lambda: self.backend.get(self.key), self.policy, sleep=self._sleep, description="State read"
            )
        except Exception as exc:
            logger.error("Failed to load state after %d attempts: %s", self.policy.max_attempts, exc)
            self._state = self.schema.create_default_state()
            self.notifier.notify(self.NOTICE_LOAD_FAILED, level="error")
            return self._state

        if stored is not None:
            self._state = self.schema.validate_and_repair(stored)
            logger.info("State loaded")
            return self._state

        logger.info("No stored state found; initializing defaults")
        state = self.schema.create_default_state()
        try:
            await self.save_state(state)
        except StorageError:
            logger.warning("Default state could not be persisted; continuing in memory")
            self._state = state
        return state

    async def save_state(self, state: Dict[str, Any]) -> None:
        try:
            await retry_async(
                lambda: self.backend.set(self.key, state), self.policy, sleep=self._sleep, description="State write"
            )
        except Exception as exc:
            logger.error("Failed to save state after %d attempts: %s", self.policy.max_attempts, exc)
            self.notifier.notify(self.NOTICE_SAVE_FAILED, level="error")
            raise StorageError(f"Saving state failed after {self.policy.max_attempts} attempts: {exc}") from exc
        self._state = state
        logger.debug("State saved")

    def get_state(self) -> Dict[str, Any]:
        if self._state is None:
            raise StateNotLoadedError("State not loaded. Call load_state() first.")
        return self._state

    async def update_state(self, partial: Mapping[str, Any]) -> None:
        """Replace the named top-level sections and persist the result."""
        current = self.get_state()
        unknown = sorted(set(partial) - set(SECTIONS))
        if unknown:
            raise ValueError(f"Unknown state sections: {unknown}")
        await self.save_state({**current, **partial})
