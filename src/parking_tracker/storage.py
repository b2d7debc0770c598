"""Local snapshot persistence for the parking state."""

import asyncio
import json
import logging
import os
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Optional

from .metrics import record_storage_write
from .state.commands import Command, ResetState
from .state.models import AppState

logger = logging.getLogger(__name__)

DATE_TYPE_TAG = "Date"


@dataclass(frozen=True)
class StorageInfo:
    """Snapshot storage usage."""

    used: int  # Bytes
    available: bool


def _encode_value(value: Any) -> Any:
    """Recursively tag datetimes so they survive a JSON round trip."""
    if isinstance(value, datetime):
        return {"__type": DATE_TYPE_TAG, "value": value.isoformat()}
    if isinstance(value, dict):
        return {key: _encode_value(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_encode_value(item) for item in value]
    if isinstance(value, Enum):
        return value.value
    return value


def _decode_object(obj: dict) -> Any:
    if obj.get("__type") == DATE_TYPE_TAG and "value" in obj:
        if not isinstance(obj["value"], str):
            raise ValueError(f"Date value must be an ISO string, got {obj['value']!r}")
        return datetime.fromisoformat(obj["value"])
    return obj


def serialize_for_storage(value: Any) -> str:
    """
    Serialize a value to JSON, tagging datetimes.

    Args:
        value: JSON-compatible data, an AppState, or any mix with datetimes

    Returns:
        JSON text where each datetime is {"__type": "Date", "value": <ISO-8601>}
    """
    if isinstance(value, AppState):
        value = value.to_snapshot()
    return json.dumps(_encode_value(value))


def deserialize_from_storage(text: str) -> Any:
    """Parse JSON text, restoring tagged datetimes."""
    return json.loads(text, object_hook=_decode_object)


class StateStorage:
    """
    File-backed key-value slot for the state snapshot.

    No method raises: failures are logged and reported through the
    return value so a broken disk never takes the tracker down.
    """

    def __init__(self, path: str | Path):
        """
        Initialize the storage.

        Args:
            path: Snapshot file location
        """
        self.path = Path(path)

    def save(self, state: AppState | dict) -> bool:
        """
        Write a snapshot, replacing any previous one.

        Returns:
            True on success
        """
        try:
            serialized = serialize_for_storage(state)
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
            tmp_path.write_text(serialized, encoding="utf-8")
            os.replace(tmp_path, self.path)
        except (OSError, TypeError, ValueError) as e:
            logger.error(f"Failed to save state to {self.path}: {e}")
            record_storage_write(False)
            return False

        record_storage_write(True)
        logger.debug(f"Saved state snapshot to {self.path}")
        return True

    def load(self) -> Optional[Any]:
        """
        Read the stored snapshot.

        Returns:
            Deserialized snapshot, or None if absent or unreadable
        """
        if not self.path.exists():
            return None

        try:
            return deserialize_from_storage(self.path.read_text(encoding="utf-8"))
        except (OSError, TypeError, ValueError) as e:
            logger.error(f"Failed to load state from {self.path}: {e}")
            return None

    def clear(self) -> bool:
        """Remove the stored snapshot."""
        try:
            self.path.unlink(missing_ok=True)
            return True
        except OSError as e:
            logger.error(f"Failed to clear state at {self.path}: {e}")
            return False

    def is_available(self) -> bool:
        """Check whether the snapshot location is writable."""
        marker = self.path.parent / "__storage_test__"
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            marker.write_text("__storage_test__", encoding="utf-8")
            marker.unlink()
            return True
        except OSError:
            return False

    def get_info(self) -> StorageInfo:
        """Get storage usage information."""
        if not self.is_available():
            return StorageInfo(used=0, available=False)

        try:
            used = self.path.stat().st_size if self.path.exists() else 0
        except OSError:
            return StorageInfo(used=0, available=False)

        return StorageInfo(used=used, available=True)


class DebouncedSaver:
    """
    Store subscriber that coalesces bursts of changes into one write.

    Saves are scheduled on the running event loop and never awaited by
    the store. Resets are written immediately.
    """

    def __init__(self, storage: StateStorage, delay_seconds: float = 0.5):
        self.storage = storage
        self.delay_seconds = delay_seconds
        self._pending: Optional[AppState] = None
        self._handle: Optional[asyncio.TimerHandle] = None

    def __call__(self, state: AppState, command: Command) -> None:
        self.schedule(state, immediate=isinstance(command, ResetState))

    @property
    def has_pending(self) -> bool:
        return self._pending is not None

    def schedule(self, state: AppState, immediate: bool = False) -> None:
        """
        Queue a state for saving; the latest queued state wins.

        Args:
            state: State to persist
            immediate: Write now instead of after the delay
        """
        self._pending = state
        self._cancel_timer()

        if immediate:
            self.flush()
            return

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # No event loop (scripts, sync callers): write straight away
            self.flush()
            return

        self._handle = loop.call_later(self.delay_seconds, self.flush)

    def flush(self) -> bool:
        """
        Write any pending state now.

        Returns:
            True if nothing was pending or the write succeeded
        """
        self._cancel_timer()
        state, self._pending = self._pending, None
        if state is None:
            return True
        return self.storage.save(state)

    def _cancel_timer(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
