"""Per-town fan-out of state change events to connected observers."""

from __future__ import annotations

import logging
from typing import Any, Callable

logger = logging.getLogger(__name__)

INTERACTABLE_UPDATE = "interactableUpdate"

Channel = Callable[[str, dict[str, Any]], None]


class TownBroadcaster:
    """Publishes events to every observer channel registered for one town.

    ``publish`` is synchronous: it returns only after every channel has been
    handed the event, so events reach each observer in publish order.
    """

    def __init__(self, town_id: str) -> None:
        self.town_id = town_id
        self._channels: dict[str, Channel] = {}

    @property
    def observer_count(self) -> int:
        return len(self._channels)

    def subscribe(self, observer_id: str, channel: Channel) -> None:
        self._channels[observer_id] = channel

    def unsubscribe(self, observer_id: str) -> None:
        self._channels.pop(observer_id, None)

    def publish(self, event_name: str, payload: dict[str, Any]) -> None:
        stale_observers: list[str] = []
        for observer_id, channel in list(self._channels.items()):
            try:
                channel(event_name, payload)
            except RuntimeError:
                logger.warning(
                    "Dropping closed channel %s in town %s", observer_id, self.town_id
                )
                stale_observers.append(observer_id)
        for observer_id in stale_observers:
            self.unsubscribe(observer_id)
        logger.debug(
            "Published %s to %d observers in town %s",
            event_name,
            len(self._channels),
            self.town_id,
        )

    def close(self) -> None:
        self._channels.clear()
