"""Authorized mutation operations on interactable areas.

Every operation checks, in order and failing at the first violation: the
town exists, the session token belongs to a player joined to that town, the
target area exists with the expected kind, and finally the payload. Only
then is the area mutated and the change broadcast, all while holding the
town lock.
"""

from __future__ import annotations

import logging
from typing import cast

from .areas import ConversationArea, InteractableArea, PosterSessionArea
from .errors import InvalidInteractableIDError, InvalidSessionTokenError, InvalidTownIDError
from .models import AreaKind, ConversationAreaModel, PosterSessionAreaModel
from .store import TownsStore
from .town import Player, Town

logger = logging.getLogger(__name__)


class AreaDispatcher:
    def __init__(self, store: TownsStore) -> None:
        self._store = store

    def _town(self, town_id: str) -> Town:
        town = self._store.get_town(town_id)
        if town is None:
            raise InvalidTownIDError(town_id)
        return town

    @staticmethod
    def _player(town: Town, session_token: str) -> Player:
        player = town.get_player_by_token(session_token)
        if player is None:
            raise InvalidSessionTokenError()
        return player

    @staticmethod
    def _area_of_kind(town: Town, area_id: str | None, kind: AreaKind) -> InteractableArea:
        area = town.find_area(area_id)
        if area is None or area.kind is not kind:
            raise InvalidInteractableIDError(area_id)
        return area

    def create_or_update_poster_area(
        self,
        town_id: str,
        session_token: str,
        model: PosterSessionAreaModel | None,
    ) -> None:
        town = self._town(town_id)
        with town.lock:
            player = self._player(town, session_token)
            area = self._area_of_kind(town, model.id if model is not None else None, AreaKind.POSTER_SESSION)
            PosterSessionArea.validate_update(model)
            area.variant.apply_update(model)
            area.emit_changed()
        logger.info("Player %s updated poster %s in town %s", player.player_id, area.id, town_id)

    def increment_poster_area_stars(self, town_id: str, area_id: str, session_token: str) -> int:
        town = self._town(town_id)
        with town.lock:
            player = self._player(town, session_token)
            area = self._area_of_kind(town, area_id, AreaKind.POSTER_SESSION)
            stars = cast(PosterSessionArea, area.variant).increment_stars()
            area.emit_changed()
        logger.debug("Player %s starred poster %s, now %d", player.player_id, area_id, stars)
        return stars

    def get_poster_area_image_contents(self, town_id: str, area_id: str, session_token: str) -> str | None:
        town = self._town(town_id)
        with town.lock:
            self._player(town, session_token)
            area = self._area_of_kind(town, area_id, AreaKind.POSTER_SESSION)
            return cast(PosterSessionArea, area.variant).get_image_contents()

    def create_conversation_area(
        self,
        town_id: str,
        session_token: str,
        model: ConversationAreaModel | None,
    ) -> None:
        town = self._town(town_id)
        with town.lock:
            player = self._player(town, session_token)
            area = self._area_of_kind(town, model.id if model is not None else None, AreaKind.CONVERSATION)
            ConversationArea.validate_update(model)
            area.variant.apply_update(model)
            area.emit_changed()
        logger.info("Player %s set topic of %s in town %s", player.player_id, area.id, town_id)
