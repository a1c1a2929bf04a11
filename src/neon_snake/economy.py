"""Persistent player economy: high score, currency and owned skins.

Persistence is best effort. Storage failures are logged and swallowed so
the game always keeps running on in-memory values.
"""

from __future__ import annotations

import json
import logging
import math
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

from neon_snake.config import EconomyConfig

logger = logging.getLogger(__name__)

HIGH_SCORE_KEY = "high_score"
CURRENCY_KEY = "currency"
OWNED_SKINS_KEY = "owned_skins"
SELECTED_SKIN_KEY = "selected_skin"

DEFAULT_SKIN_ID = "neon"

# Cosmetic only; prices in coins.
SKIN_PRICES: dict[str, int] = {
    "neon": 0,
    "python": 30,
    "cosmic": 50,
    "circuit": 50,
    "electric": 60,
    "holographic": 80,
    "inferno": 90,
    "crystal": 100,
    "phantom": 120,
}


_FREE_SKINS = [skin for skin, price in SKIN_PRICES.items() if price == 0]


class Storage(ABC):
    """Opaque key-value persistence.

    Backends that buffer writes report them through :meth:`take_pending`
    so a caller can move the actual :meth:`write` off the event loop.
    """

    @abstractmethod
    def get(self, key: str, default: Any = None) -> Any: ...

    @abstractmethod
    def set(self, key: str, value: Any) -> bool: ...

    def take_pending(self) -> str | None:
        """Serialize unwritten changes and mark them written."""
        return None

    def write(self, payload: str) -> bool:
        return True

    def flush(self) -> bool:
        payload = self.take_pending()
        return True if payload is None else self.write(payload)


class MemoryStorage(Storage):
    def __init__(self, initial: dict | None = None) -> None:
        self._data: dict[str, Any] = dict(initial or {})

    def get(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)

    def set(self, key: str, value: Any) -> bool:
        self._data[key] = value
        return True


class JsonFileStorage(Storage):
    """Stores every key in one JSON document on disk.

    Reads happen once at construction. With ``autoflush`` each write
    rewrites the file; without it changes stay in memory until flushed.
    """

    def __init__(self, path: str | Path, autoflush: bool = True) -> None:
        self.path = Path(path)
        self.autoflush = autoflush
        self._data: dict[str, Any] = {}
        self._dirty = False
        try:
            raw = json.loads(self.path.read_text())
        except FileNotFoundError:
            raw = {}
        except (OSError, json.JSONDecodeError) as exc:
            logger.warning("Could not read storage %s: %s", self.path, exc)
            raw = {}
        if isinstance(raw, dict):
            self._data = raw
        else:
            logger.warning("Ignoring non-object storage document in %s.", self.path)

    def get(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)

    def set(self, key: str, value: Any) -> bool:
        self._data[key] = value
        self._dirty = True
        if not self.autoflush:
            return True
        return self.flush()

    def take_pending(self) -> str | None:
        if not self._dirty:
            return None
        self._dirty = False
        return json.dumps(self._data, indent=2)

    def write(self, payload: str) -> bool:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(payload)
        except OSError as exc:
            logger.warning("Could not write storage %s: %s", self.path, exc)
            return False
        return True


def _as_int(value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


class Wallet:
    """Player progress backed by a :class:`Storage`.

    Every value is read from storage on access, so wallets sharing one
    storage (one per server session) never overwrite each other.
    """

    def __init__(
        self,
        storage: Storage | None = None,
        config: EconomyConfig | None = None,
    ) -> None:
        self.storage = storage if storage is not None else MemoryStorage()
        self.config = config or EconomyConfig()

    @property
    def high_score(self) -> int:
        return _as_int(self.storage.get(HIGH_SCORE_KEY, 0))

    @property
    def currency(self) -> int:
        return _as_int(self.storage.get(CURRENCY_KEY, 0))

    @property
    def owned_skins(self) -> list[str]:
        """Purchased skins plus every free one."""
        stored = self.storage.get(OWNED_SKINS_KEY, [])
        if not isinstance(stored, list):
            stored = []
        owned = [s for s in stored if isinstance(s, str) and s in SKIN_PRICES]
        return list(dict.fromkeys(owned + _FREE_SKINS))

    @property
    def selected_skin(self) -> str:
        selected = self.storage.get(SELECTED_SKIN_KEY, DEFAULT_SKIN_ID)
        return selected if selected in self.owned_skins else DEFAULT_SKIN_ID

    def death_reward(self, score: int) -> int:
        """Coins awarded on death; non-decreasing in *score*."""
        cfg = self.config
        return cfg.coin_per_death + math.floor(score * cfg.coin_per_score_multiplier)

    def award(self, amount: int) -> int:
        currency = self.currency
        if amount <= 0:
            return currency
        currency += amount
        self.storage.set(CURRENCY_KEY, currency)
        return currency

    def record_score(self, score: int) -> bool:
        """Update the high score. Returns True when *score* beat it."""
        if score <= self.high_score:
            return False
        self.storage.set(HIGH_SCORE_KEY, score)
        return True

    def purchase_skin(self, skin_id: str) -> bool:
        price = SKIN_PRICES.get(skin_id)
        owned = self.owned_skins
        if price is None or skin_id in owned:
            return False
        currency = self.currency
        if currency < price:
            logger.info("Cannot afford skin %s (%d < %d).", skin_id, currency, price)
            return False
        self.storage.set(CURRENCY_KEY, currency - price)
        self.storage.set(OWNED_SKINS_KEY, owned + [skin_id])
        logger.info("Purchased skin %s for %d coins.", skin_id, price)
        return True

    def select_skin(self, skin_id: str) -> bool:
        if skin_id not in self.owned_skins:
            return False
        self.storage.set(SELECTED_SKIN_KEY, skin_id)
        return True

    def to_dict(self) -> dict:
        return {
            "high_score": self.high_score,
            "currency": self.currency,
            "owned_skins": self.owned_skins,
            "selected_skin": self.selected_skin,
        }
