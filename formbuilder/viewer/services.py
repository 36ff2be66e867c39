"""Collaborators the renderer reaches through value-producing widgets."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, Protocol

PlaceResult = dict[str, Any]


class AddressLookup(Protocol):
    def search(self, query: str, on_result: Callable[[PlaceResult], None]) -> None:
        """Resolve ``query`` to ``{formattedAddress, lat, lng}`` and call ``on_result``.

        May answer synchronously or later from another event-loop turn.
        """
        ...
