from __future__ import annotations

"""Last extraction result per client.

Holds the raw CSV of the most recent model reply (or converted text) so the
active view can be copied or downloaded later. Process-local only; a restart
forgets everything. At most ``max_clients`` results are kept, the least
recently written client is dropped first.
"""

import threading
from collections import OrderedDict
from typing import Optional


DEFAULT_MAX_CLIENTS = 1024


class ResultStore:
    def __init__(self, max_clients: int = DEFAULT_MAX_CLIENTS) -> None:
        if max_clients < 1:
            raise ValueError("max_clients must be at least 1")
        self.max_clients = max_clients
        self._lock = threading.Lock()
        self._results: "OrderedDict[str, str]" = OrderedDict()

    def put(self, client_id: str, raw_csv: str) -> None:
        with self._lock:
            self._results[client_id] = raw_csv
            self._results.move_to_end(client_id)
            while len(self._results) > self.max_clients:
                self._results.popitem(last=False)

    def get(self, client_id: str) -> Optional[str]:
        with self._lock:
            return self._results.get(client_id)

    def __len__(self) -> int:
        with self._lock:
            return len(self._results)

    def clear(self, client_id: Optional[str] = None) -> None:
        with self._lock:
            if client_id is None:
                self._results.clear()
            else:
                self._results.pop(client_id, None)
