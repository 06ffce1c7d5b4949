# Area: Sync
"""
glitch_duel._sync.transport — Pub/sub channel interfaces
========================================================

The match engine talks to the outside world through two abstractions:

- ``Channel``: publish/subscribe of JSON payloads under an event name.
  Delivery is best-effort and unordered; a channel echoes a publish back
  to the publisher's own subscribers.
- ``Presence``: per-channel set of members, each holding one full
  snapshot record. ``update`` replaces the member's whole record.

``InMemoryHub`` implements both for tests, the demo runner and bot
matches. Deliveries are queued and only happen on ``pump()``, so a test
can interleave both peers' actions deterministically and inject loss or
duplication.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections import defaultdict, deque
from dataclasses import dataclass
from typing import Any, Callable, Deque, Dict, List, Optional, Tuple

from ..errors import TransportError

logger = logging.getLogger("glitch_duel.sync.transport")

Unsubscribe = Callable[[], None]


@dataclass(frozen=True)
class PresenceEvent:
    """
    One presence change.

    Attributes:
        action: "enter", "update" or "leave"
        client_id: Member whose record changed
        data: The member's full record (last known record on leave)
    """

    action: str
    client_id: str
    data: Optional[Dict[str, Any]]


class Presence(ABC):
    """Presence set of one channel, seen from one client."""

    @abstractmethod
    def enter(self, data: Dict[str, Any]) -> None:
        """Join the set with a full record."""

    @abstractmethod
    def update(self, data: Dict[str, Any]) -> None:
        """Replace this client's whole record."""

    @abstractmethod
    def leave(self) -> None:
        """Leave the set."""

    @abstractmethod
    def get(self) -> Dict[str, Dict[str, Any]]:
        """Current members: client id -> record."""

    @abstractmethod
    def subscribe(self, callback: Callable[[PresenceEvent], None]) -> Unsubscribe:
        """Receive enter/update/leave events. Returns an unsubscribe function."""


class Channel(ABC):
    """A named pub/sub channel, seen from one client."""

    name: str
    client_id: str
    presence: Presence

    @abstractmethod
    def publish(self, event: str, data: Dict[str, Any]) -> None:
        """Publish a payload. Raises TransportError on failure."""

    @abstractmethod
    def subscribe(self, event: str, callback: Callable[[Dict[str, Any]], None]) -> Unsubscribe:
        """Receive payloads published under ``event``."""


# ══════════════════════════════════════════════════════════════
# IN-MEMORY HUB
# ══════════════════════════════════════════════════════════════

DeliveryFilter = Callable[[str, Dict[str, Any]], bool]


class InMemoryHub:
    """
    Process-local transport shared by every client of a test or demo.

    Attributes:
        drop_when: Optional predicate (channel name, payload) -> True to
            silently lose a message
        duplicate_when: Optional predicate -> True to deliver a message twice
        fail_publish: When True every publish raises TransportError
        fail_presence: When True every presence call raises TransportError
    """

    def __init__(self) -> None:
        self._queue: Deque[Tuple[Callable[[], None], str]] = deque()
        self._subscribers: Dict[Tuple[str, str], List[Tuple[int, Callable]]] = defaultdict(list)
        self._members: Dict[str, Dict[str, Dict[str, Any]]] = defaultdict(dict)
        self._presence_subscribers: Dict[str, List[Tuple[int, Callable]]] = defaultdict(list)
        self._next_token = 0
        self.drop_when: Optional[DeliveryFilter] = None
        self.duplicate_when: Optional[DeliveryFilter] = None
        self.fail_publish = False
        self.fail_presence = False
        self.published: List[Tuple[str, str, Dict[str, Any]]] = []

    def channel(self, name: str, client_id: str) -> "HubChannel":
        """Get a client's handle on a channel."""
        return HubChannel(self, name, client_id)

    @property
    def pending(self) -> int:
        return len(self._queue)

    def pump(self, limit: int = 10_000) -> int:
        """
        Deliver queued messages and presence events, including ones
        queued by the callbacks themselves.

        Returns:
            Number of deliveries made
        """
        delivered = 0
        while self._queue and delivered < limit:
            deliver, _label = self._queue.popleft()
            deliver()
            delivered += 1
        return delivered

    # ── internals used by HubChannel / HubPresence ─────────────

    def _token(self) -> int:
        self._next_token += 1
        return self._next_token

    def _publish(self, channel: str, sender: str, event: str, data: Dict[str, Any]) -> None:
        if self.fail_publish:
            raise TransportError(channel, "publish", "hub offline")
        self.published.append((channel, sender, data))
        if self.drop_when is not None and self.drop_when(channel, data):
            logger.debug("Dropped message on %s: %s", channel, data.get("type"))
            return
        copies = 2 if self.duplicate_when is not None and self.duplicate_when(channel, data) else 1
        for _ in range(copies):
            for _token, callback in list(self._subscribers[(channel, event)]):
                self._queue.append((_bind(callback, dict(data)), f"{channel}:{event}"))

    def _subscribe(self, channel: str, event: str, callback: Callable) -> Unsubscribe:
        token = self._token()
        subscribers = self._subscribers[(channel, event)]
        subscribers.append((token, callback))

        def unsubscribe() -> None:
            subscribers[:] = [entry for entry in subscribers if entry[0] != token]

        return unsubscribe

    def _presence_change(self, channel: str, client_id: str, action: str,
                         data: Optional[Dict[str, Any]]) -> None:
        if self.fail_presence:
            raise TransportError(channel, f"presence {action}", "hub offline")
        members = self._members[channel]
        if action == "leave":
            if client_id not in members:
                return
            data = members.pop(client_id)
        else:
            if action == "update" and client_id not in members:
                action = "enter"
            members[client_id] = dict(data or {})
            data = members[client_id]
        event = PresenceEvent(action=action, client_id=client_id, data=dict(data))
        for _token, callback in list(self._presence_subscribers[channel]):
            self._queue.append((_bind(callback, event), f"{channel}:presence"))

    def _presence_subscribe(self, channel: str, callback: Callable) -> Unsubscribe:
        token = self._token()
        subscribers = self._presence_subscribers[channel]
        subscribers.append((token, callback))

        def unsubscribe() -> None:
            subscribers[:] = [entry for entry in subscribers if entry[0] != token]

        return unsubscribe


def _bind(callback: Callable, argument: Any) -> Callable[[], None]:
    return lambda: callback(argument)


class HubPresence(Presence):
    """Presence handle of one client on an ``InMemoryHub`` channel."""

    def __init__(self, hub: InMemoryHub, channel: str, client_id: str) -> None:
        self._hub = hub
        self._channel = channel
        self._client_id = client_id

    def enter(self, data: Dict[str, Any]) -> None:
        self._hub._presence_change(self._channel, self._client_id, "enter", data)

    def update(self, data: Dict[str, Any]) -> None:
        self._hub._presence_change(self._channel, self._client_id, "update", data)

    def leave(self) -> None:
        self._hub._presence_change(self._channel, self._client_id, "leave", None)

    def get(self) -> Dict[str, Dict[str, Any]]:
        return {cid: dict(record) for cid, record in self._hub._members[self._channel].items()}

    def subscribe(self, callback: Callable[[PresenceEvent], None]) -> Unsubscribe:
        return self._hub._presence_subscribe(self._channel, callback)


class HubChannel(Channel):
    """Channel handle of one client on an ``InMemoryHub``."""

    def __init__(self, hub: InMemoryHub, name: str, client_id: str) -> None:
        self._hub = hub
        self.name = name
        self.client_id = client_id
        self.presence = HubPresence(hub, name, client_id)

    def publish(self, event: str, data: Dict[str, Any]) -> None:
        self._hub._publish(self.name, self.client_id, event, data)

    def subscribe(self, event: str, callback: Callable[[Dict[str, Any]], None]) -> Unsubscribe:
        return self._hub._subscribe(self.name, event, callback)
