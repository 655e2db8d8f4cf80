"""Towns, their players and the areas they own."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Iterable

from .areas import InteractableArea
from .broadcast import Channel, TownBroadcaster
from .errors import GeometryError, InvalidInteractableIDError
from .models import MapObject
from .security import generate_id, generate_token, hash_token

logger = logging.getLogger(__name__)


@dataclass
class Player:
    player_id: str
    user_name: str
    session_token: str = field(repr=False)
    area_id: str | None = None


class Town:
    """A shared space: interactable areas, connected players, one broadcaster.

    ``lock`` guards every validate, mutate and emit sequence on the town's
    areas and players.
    """

    def __init__(
        self,
        town_id: str,
        friendly_name: str,
        map_objects: Iterable[MapObject],
        server_salt: str,
        is_publicly_listed: bool = True,
    ) -> None:
        self.town_id = town_id
        self.friendly_name = friendly_name
        self.is_publicly_listed = is_publicly_listed
        self.broadcaster = TownBroadcaster(town_id)
        self.lock = threading.RLock()
        self._server_salt = server_salt
        self._players: dict[str, Player] = {}
        self._players_by_token: dict[str, Player] = {}
        self._areas: dict[str, InteractableArea] = {}
        for map_object in map_objects:
            if map_object.name in self._areas:
                raise GeometryError(f"Duplicate area id {map_object.name}")
            self._areas[map_object.name] = InteractableArea.from_map_object(map_object, self.broadcaster)

    @property
    def occupancy(self) -> int:
        return len(self._players)

    @property
    def players(self) -> list[Player]:
        return list(self._players.values())

    @property
    def areas(self) -> list[InteractableArea]:
        return list(self._areas.values())

    def find_area(self, area_id: str | None) -> InteractableArea | None:
        if area_id is None:
            return None
        return self._areas.get(area_id)

    def interactable_models(self) -> list[dict[str, Any]]:
        return [area.to_model() for area in self._areas.values()]

    def get_player_by_token(self, token: str | None) -> Player | None:
        if not token:
            return None
        return self._players_by_token.get(hash_token(token, self._server_salt))

    def join(self, user_name: str, channel: Channel) -> Player:
        with self.lock:
            player = Player(player_id=generate_id(), user_name=user_name, session_token=generate_token())
            self._players[player.player_id] = player
            self._players_by_token[hash_token(player.session_token, self._server_salt)] = player
            self.broadcaster.subscribe(player.player_id, channel)
        logger.info("Player %s joined town %s", player.player_id, self.town_id)
        return player

    def leave(self, player: Player) -> None:
        with self.lock:
            self.leave_area(player)
            self.broadcaster.unsubscribe(player.player_id)
            self._players.pop(player.player_id, None)
            self._players_by_token.pop(hash_token(player.session_token, self._server_salt), None)
        logger.info("Player %s left town %s", player.player_id, self.town_id)

    def enter_area(self, player: Player, area_id: str) -> InteractableArea:
        with self.lock:
            area = self.find_area(area_id)
            if area is None:
                raise InvalidInteractableIDError(area_id)
            if player.area_id == area.id:
                return area
            self.leave_area(player)
            area.add_occupant(player)
        return area

    def leave_area(self, player: Player) -> None:
        with self.lock:
            area = self.find_area(player.area_id)
            if area is not None:
                area.remove_occupant(player)
            player.area_id = None

    def disconnect_all(self) -> None:
        with self.lock:
            self.broadcaster.close()
            self._players.clear()
            self._players_by_token.clear()
