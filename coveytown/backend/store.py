"""Registry of live towns."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Iterable

from .models import MapObject, TownSummary
from .security import generate_id
from .town import Town

logger = logging.getLogger(__name__)


@dataclass
class TownsStore:
    """Owns every live town of one server; create one per app or test.

    Plain ``def`` endpoints reach the store from worker threads, so the town
    mapping is only read or changed under ``_lock``.
    """

    server_salt: str

    def __post_init__(self) -> None:
        self._towns: dict[str, Town] = {}
        self._lock = threading.Lock()

    def create_town(
        self,
        friendly_name: str,
        map_objects: Iterable[MapObject],
        is_publicly_listed: bool = True,
    ) -> Town:
        town_id = generate_id()
        town = Town(
            town_id=town_id,
            friendly_name=friendly_name,
            map_objects=map_objects,
            server_salt=self.server_salt,
            is_publicly_listed=is_publicly_listed,
        )
        with self._lock:
            self._towns[town_id] = town
        logger.info("Created town %s (%s) with %d areas", town_id, friendly_name, len(town.areas))
        return town

    def get_town(self, town_id: str) -> Town | None:
        with self._lock:
            return self._towns.get(town_id)

    def list_towns(self) -> list[TownSummary]:
        with self._lock:
            towns = list(self._towns.values())
        return [
            TownSummary(
                town_id=town.town_id,
                friendly_name=town.friendly_name,
                current_occupancy=town.occupancy,
            )
            for town in towns
            if town.is_publicly_listed
        ]

    def delete_town(self, town_id: str) -> bool:
        with self._lock:
            town = self._towns.pop(town_id, None)
        if town is None:
            return False
        town.disconnect_all()
        logger.info("Deleted town %s", town_id)
        return True

    def clear(self) -> None:
        with self._lock:
            town_ids = list(self._towns)
        for town_id in town_ids:
            self.delete_town(town_id)
