# phenofarm/utils/storage.py
"""Durable key-value slots behind the cart, favorites, price alerts and
view-mode stores.

Values are JSON text. A slot holding text that does not parse reads as the
caller's default; it is never an error.
"""
import json
import logging
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from phenofarm.models.storage import StorageSlot

logger = logging.getLogger(__name__)


class KeyValueStorage:
    """Interface: raw string slots addressed by key."""

    def get(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def set(self, key: str, value: str) -> None:
        raise NotImplementedError

    def remove(self, key: str) -> None:
        raise NotImplementedError


class MemoryStorage(KeyValueStorage):
    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)


class DatabaseStorage(KeyValueStorage):
    """Slots of a single owner persisted in the storage_slots table."""

    def __init__(self, db: Session, owner_id: int):
        self.db = db
        self.owner_id = owner_id

    def _slot(self, key: str) -> Optional[StorageSlot]:
        return self.db.query(StorageSlot).filter(
            StorageSlot.owner_id == self.owner_id, StorageSlot.key == key
        ).first()

    def get(self, key: str) -> Optional[str]:
        slot = self._slot(key)
        return slot.value if slot else None

    def set(self, key: str, value: str) -> None:
        slot = self._slot(key)
        if slot:
            slot.value = value
        else:
            self.db.add(StorageSlot(owner_id=self.owner_id, key=key, value=value))
        self.db.commit()

    def remove(self, key: str) -> None:
        slot = self._slot(key)
        if slot:
            self.db.delete(slot)
            self.db.commit()


def load_json(storage: KeyValueStorage, key: str, default: Any) -> Any:
    raw = storage.get(key)
    if raw is None:
        return default
    try:
        return json.loads(raw)
    except (TypeError, ValueError):
        logger.warning("Discarding malformed value stored under %r", key)
        return default


def save_json(storage: KeyValueStorage, key: str, value: Any) -> None:
    storage.set(key, json.dumps(value))
