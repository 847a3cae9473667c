"""In-process publish/subscribe on named signals.

Each subscriber receives its own ``asyncio.Queue`` so consumers never compete
for messages. Messages on one signal are delivered to every queue in publish
order.
"""

from __future__ import annotations

import asyncio
from typing import Any, Dict, List

UPDATE = "update"
READY = "ready"


class Publisher:
    """Fan-out message distributor backed by ``asyncio.Queue``.

    Parameters
    ----------
    maxsize:
        Maximum size for subscriber queues.  ``0`` means unbounded.
    overflow:
        Behaviour when a subscriber queue is full.  ``"drop_new"`` drops the
        message for that subscriber and ``"drop_oldest"`` removes the oldest
        message before enqueuing the new one.  Publishing never raises.
    """

    def __init__(self, maxsize: int = 0, overflow: str = "drop_new") -> None:
        if overflow not in ("drop_new", "drop_oldest"):
            raise ValueError(f"unknown overflow policy: {overflow}")
        self._maxsize = maxsize
        self._overflow = overflow
        self._subscribers: Dict[str, List[asyncio.Queue]] = {}

    def subscribe(self, signal: str = UPDATE) -> asyncio.Queue:
        """Return a new queue receiving all future messages on ``signal``."""

        q: asyncio.Queue = asyncio.Queue(maxsize=self._maxsize)
        self._subscribers.setdefault(signal, []).append(q)
        return q

    def unsubscribe(self, queue: asyncio.Queue, signal: str = UPDATE) -> None:
        subs = self._subscribers.get(signal, [])
        if queue in subs:
            subs.remove(queue)

    def subscriber_count(self, signal: str = UPDATE) -> int:
        return len(self._subscribers.get(signal, []))

    def publish(self, signal: str, message: Any) -> None:
        """Publish *message* to all subscribers of *signal*."""

        for q in list(self._subscribers.get(signal, [])):
            try:
                q.put_nowait(message)
            except asyncio.QueueFull:
                if self._overflow == "drop_oldest":
                    q.get_nowait()
                    q.put_nowait(message)


__all__ = ["Publisher", "READY", "UPDATE"]
