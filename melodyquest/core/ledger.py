from __future__ import annotations

import json
import logging
from enum import Enum
from typing import Dict, Iterable, List, Optional

from melodyquest.core.storage import KeyValueStore, write_through

logger = logging.getLogger(__name__)

LEDGER_KEY = "mq-collected"


class LedgerPolicy(str, Enum):
    """Whether the same token may be collected more than once."""

    DEDUPE = "dedupe"
    APPEND = "append"


class RewardLedger:
    """Ordered, persisted list of collected reward tokens.

    Insertion order is collection order. With ``LedgerPolicy.DEDUPE`` a token
    already present is not added again; with ``APPEND`` every grant is kept.
    """

    def __init__(
        self,
        store: KeyValueStore,
        alphabet: Iterable[str],
        policy: LedgerPolicy = LedgerPolicy.DEDUPE,
        key: str = LEDGER_KEY,
    ) -> None:
        self._store = store
        self._alphabet = frozenset(alphabet)
        self._policy = LedgerPolicy(policy)
        self._key = key
        self._tokens: List[str] = []

    @property
    def policy(self) -> LedgerPolicy:
        return self._policy

    @property
    def tokens(self) -> List[str]:
        return list(self._tokens)

    def __len__(self) -> int:
        return len(self._tokens)

    def __contains__(self, token: object) -> bool:
        return token in self._tokens

    def accepts(self, token: str) -> bool:
        """True if ``token`` belongs to the configured alphabet."""
        return token in self._alphabet

    def load(self) -> List[str]:
        """Rehydrate from the store. A corrupt entry loads as an empty ledger."""
        self._tokens = self._parse(self._store.get(self._key))
        return self.tokens

    def add(self, token: str) -> bool:
        """Record ``token``; return True if the ledger changed."""
        if token not in self._alphabet:
            raise ValueError(f"Unknown reward token: {token!r}")
        if self._policy is LedgerPolicy.DEDUPE and token in self._tokens:
            return False
        self._tokens.append(token)
        write_through(self._store, self._key, json.dumps(self._tokens))
        return True

    def clear(self) -> None:
        self._tokens = []
        write_through(self._store, self._key, None)

    def _parse(self, raw: Optional[str]) -> List[str]:
        if not raw:
            return []
        try:
            payload = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.warning("Ignoring corrupt ledger %r: %s", raw, e)
            return []
        if not isinstance(payload, list):
            logger.warning("Ignoring ledger that is not a list: %r", raw)
            return []
        tokens = []
        for item in payload:
            if isinstance(item, str) and item in self._alphabet:
                tokens.append(item)
            else:
                logger.warning("Dropping unknown ledger entry %r", item)
        return tokens


class CompletionFlags:
    """Per-scene one-shot markers stored as ``<prefix><scene> = "1"``."""

    def __init__(self, store: KeyValueStore, prefix: str) -> None:
        self._store = store
        self._prefix = prefix
        self._flags: Dict[int, bool] = {}

    def key(self, scene: int) -> str:
        return f"{self._prefix}{scene}"

    def load(self, scene_count: int) -> Dict[int, bool]:
        # only an exact "1" counts; anything else is "not yet granted"
        self._flags = {
            scene: True for scene in range(scene_count) if self._store.get(self.key(scene)) == "1"
        }
        return dict(self._flags)

    def is_set(self, scene: int) -> bool:
        return self._flags.get(scene, False)

    def set(self, scene: int) -> None:
        self._flags[scene] = True
        write_through(self._store, self.key(scene), "1")

    def clear(self, scene_count: int) -> None:
        self._flags = {}
        for scene in range(scene_count):
            write_through(self._store, self.key(scene), None)

    def as_dict(self) -> Dict[int, bool]:
        return dict(self._flags)


__all__ = ["LedgerPolicy", "RewardLedger", "CompletionFlags", "LEDGER_KEY"]
