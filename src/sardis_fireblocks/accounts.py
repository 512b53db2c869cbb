"""Address → Fireblocks vault account mapping.

``AccountCache`` is an ordinary object owned by whoever builds the signer
and passed in by reference. There is no module-level instance.
"""
from __future__ import annotations

import logging
import threading
from typing import Optional

logger = logging.getLogger(__name__)


def normalize_address(address: str) -> str:
    """Lower-case hex address with a ``0x`` prefix."""
    address = address.strip()
    if not address:
        raise ValueError("Address is required")
    if address[:2].lower() == "0x":
        address = address[2:]
    return "0x" + address.lower()


class AccountCache:
    """Thread-safe cache of vault account ids keyed by address.

    Addresses are compared case-insensitively, so checksummed and
    lower-case forms resolve to the same entry.
    """

    def __init__(self, initial: Optional[dict[str, str]] = None) -> None:
        self._lock = threading.RLock()
        self._accounts: dict[str, str] = {}
        for address, account_id in (initial or {}).items():
            self.add(account_id, address)

    def add(self, account_id: str, address: str) -> None:
        """Register ``address`` as belonging to vault ``account_id``."""
        key = normalize_address(address)
        with self._lock:
            previous = self._accounts.get(key)
            self._accounts[key] = str(account_id)
        if previous is not None and previous != str(account_id):
            logger.warning(
                f"Address {key} remapped from vault {previous} to {account_id}"
            )

    def get(self, address: str) -> Optional[str]:
        with self._lock:
            return self._accounts.get(normalize_address(address))

    def remove(self, address: str) -> bool:
        with self._lock:
            return self._accounts.pop(normalize_address(address), None) is not None

    def snapshot(self) -> dict[str, str]:
        """Copy of the current mapping."""
        with self._lock:
            return dict(self._accounts)

    def clear(self) -> None:
        with self._lock:
            self._accounts.clear()

    def __contains__(self, address: object) -> bool:
        if not isinstance(address, str) or not address.strip():
            return False
        return self.get(address) is not None

    def __len__(self) -> int:
        with self._lock:
            return len(self._accounts)
