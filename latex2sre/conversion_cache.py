"""
Memoization of conversion results.

Keys are ConversionKey tuples compared field by field with no
normalization. Entries are never evicted, which suits a short-lived CLI
process.
"""

from typing import Dict, Optional

from .config import ConversionKey


class ConversionCache:
    """In-memory speech output cache that can be switched off."""

    def __init__(self, enabled: bool = True):
        self.enabled = enabled
        self._entries: Dict[ConversionKey, str] = {}
        self.hits = 0
        self.misses = 0

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, key: ConversionKey) -> Optional[str]:
        if not self.enabled:
            self.misses += 1
            return None
        value = self._entries.get(key)
        if value is None:
            self.misses += 1
        else:
            self.hits += 1
        return value

    def put(self, key: ConversionKey, value: str) -> None:
        if not self.enabled:
            return
        self._entries[key] = value
