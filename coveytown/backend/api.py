"""FastAPI endpoints for towns, interactable areas and websocket sync."""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any

from fastapi import Depends, FastAPI, HTTPException, Query, Response, WebSocket, WebSocketDisconnect
from pydantic import BaseModel, ConfigDict, Field

from .config import load_settings
from .dispatcher import AreaDispatcher
from .errors import (
    GeometryError,
    InvalidInteractableIDError,
    InvalidSessionTokenError,
    InvalidTownIDError,
    TownError,
    ValidationError,
)
from .models import ConversationAreaModel, MapObject, PosterSessionAreaModel
from .store import TownsStore
from .town import Player, Town

logger = logging.getLogger(__name__)


class MapObjectPayload(BaseModel):
    name: str = Field(min_length=1)
    type: str
    x: float = 0
    y: float = 0
    width: float | None = None
    height: float | None = None


class CreateTownRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    friendly_name: str = Field(alias="friendlyName", min_length=1, max_length=200)
    is_publicly_listed: bool = Field(default=True, alias="isPubliclyListed")
    map_objects: list[MapObjectPayload] = Field(default_factory=list, alias="mapObjects")


class CreateTownResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    town_id: str = Field(alias="townID")


class TownListing(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    town_id: str = Field(alias="townID")
    friendly_name: str = Field(alias="friendlyName")
    current_occupancy: int = Field(alias="currentOccupancy")


class TokenEnvelope(BaseModel):
    token: str


class PosterSessionAreaEnvelope(BaseModel):
    token: str
    area: PosterSessionAreaModel | None = None


class ConversationAreaEnvelope(BaseModel):
    token: str
    area: ConversationAreaModel | None = None


class StarsResponse(BaseModel):
    stars: int


class ImageContentsResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    image_contents: str | None = Field(alias="imageContents")


ERROR_STATUS: dict[type[TownError], int] = {
    InvalidTownIDError: 404,
    InvalidSessionTokenError: 403,
    InvalidInteractableIDError: 404,
    ValidationError: 400,
    GeometryError: 400,
}


def _http_error(error: TownError) -> HTTPException:
    status_code = ERROR_STATUS.get(type(error), 400)
    logger.info("Rejected request: %s", error)
    return HTTPException(status_code=status_code, detail=str(error))


def _default_store() -> TownsStore:
    return TownsStore(server_salt=load_settings().server_salt)


class TownObserver:
    """One websocket's subscription to a town broadcaster.

    Events are queued synchronously and written by a sender task, so a
    broadcast never waits on the network. Once the sender has stopped the
    observer raises ``RuntimeError``, which makes the broadcaster drop it.
    """

    def __init__(self, websocket: WebSocket) -> None:
        self._websocket = websocket
        self._outbox: asyncio.Queue[dict[str, Any]] = asyncio.Queue()
        self._sender: asyncio.Task[None] | None = None

    def __call__(self, event_name: str, payload: dict[str, Any]) -> None:
        if self._sender is not None and self._sender.done():
            raise RuntimeError("websocket sender stopped")
        self._outbox.put_nowait({"type": event_name, "payload": payload})

    def start(self) -> None:
        self._sender = asyncio.create_task(self._drain())

    async def _drain(self) -> None:
        while True:
            message = await self._outbox.get()
            await self._websocket.send_json(message)

    async def stop(self) -> None:
        if self._sender is None:
            return
        self._sender.cancel()
        try:
            await self._sender
        except asyncio.CancelledError:
            pass
        except (RuntimeError, WebSocketDisconnect) as error:
            logger.warning("Websocket sender stopped early: %r", error)


def _decode_client_message(raw_message: str) -> Any:
    try:
        return json.loads(raw_message)
    except ValueError:
        return None


def _handle_client_message(town: Town, player: Player, message: Any) -> None:
    if not isinstance(message, dict):
        logger.debug("Ignoring malformed message from %s", player.player_id)
        return
    message_type = message.get("type")
    if message_type == "enterArea":
        town.enter_area(player, str(message.get("areaID", "")))
    elif message_type == "leaveArea":
        town.leave_area(player)
    else:
        logger.debug("Ignoring unknown message type %r from %s", message_type, player.player_id)


def create_app(store: TownsStore | None = None) -> FastAPI:
    app = FastAPI(title="Covey Town API", version="0.1.0")
    towns_store = store if store is not None else _default_store()
    dispatcher = AreaDispatcher(towns_store)
    app.state.towns_store = towns_store
    app.state.dispatcher = dispatcher

    def get_store() -> TownsStore:
        return towns_store

    def get_dispatcher() -> AreaDispatcher:
        return dispatcher

    @app.post("/api/towns", response_model=CreateTownResponse)
    def create_town(
        payload: CreateTownRequest,
        local_store: TownsStore = Depends(get_store),
    ) -> CreateTownResponse:
        map_objects = [MapObject(**each.model_dump()) for each in payload.map_objects]
        try:
            town = local_store.create_town(
                friendly_name=payload.friendly_name,
                map_objects=map_objects,
                is_publicly_listed=payload.is_publicly_listed,
            )
        except TownError as error:
            raise _http_error(error) from error
        return CreateTownResponse(town_id=town.town_id)

    @app.get("/api/towns", response_model=list[TownListing])
    def list_towns(local_store: TownsStore = Depends(get_store)) -> list[TownListing]:
        return [
            TownListing(
                town_id=summary.town_id,
                friendly_name=summary.friendly_name,
                current_occupancy=summary.current_occupancy,
            )
            for summary in local_store.list_towns()
        ]

    @app.post("/api/towns/{town_id}/posterSessionArea", status_code=204)
    async def create_poster_session_area(
        town_id: str,
        payload: PosterSessionAreaEnvelope,
        local_dispatcher: AreaDispatcher = Depends(get_dispatcher),
    ) -> Response:
        try:
            local_dispatcher.create_or_update_poster_area(town_id, payload.token, payload.area)
        except TownError as error:
            raise _http_error(error) from error
        return Response(status_code=204)

    @app.post("/api/towns/{town_id}/posterSessionArea/{area_id}/stars", response_model=StarsResponse)
    async def increment_poster_area_stars(
        town_id: str,
        area_id: str,
        payload: TokenEnvelope,
        local_dispatcher: AreaDispatcher = Depends(get_dispatcher),
    ) -> StarsResponse:
        try:
            stars = local_dispatcher.increment_poster_area_stars(town_id, area_id, payload.token)
        except TownError as error:
            raise _http_error(error) from error
        return StarsResponse(stars=stars)

    @app.get(
        "/api/towns/{town_id}/posterSessionArea/{area_id}/imageContents",
        response_model=ImageContentsResponse,
    )
    async def get_poster_area_image_contents(
        town_id: str,
        area_id: str,
        token: str = Query(min_length=1),
        local_dispatcher: AreaDispatcher = Depends(get_dispatcher),
    ) -> ImageContentsResponse:
        try:
            image_contents = local_dispatcher.get_poster_area_image_contents(town_id, area_id, token)
        except TownError as error:
            raise _http_error(error) from error
        return ImageContentsResponse(image_contents=image_contents)

    @app.post("/api/towns/{town_id}/conversationArea", status_code=204)
    async def create_conversation_area(
        town_id: str,
        payload: ConversationAreaEnvelope,
        local_dispatcher: AreaDispatcher = Depends(get_dispatcher),
    ) -> Response:
        try:
            local_dispatcher.create_conversation_area(town_id, payload.token, payload.area)
        except TownError as error:
            raise _http_error(error) from error
        return Response(status_code=204)

    @app.websocket("/ws/towns/{town_id}")
    async def town_ws(
        websocket: WebSocket,
        town_id: str,
        local_store: TownsStore = Depends(get_store),
    ) -> None:
        town = local_store.get_town(town_id)
        if town is None:
            await websocket.close(code=1008)
            return
        user_name = websocket.query_params.get("userName") or "Anonymous"
        await websocket.accept()

        observer = TownObserver(websocket)
        with town.lock:
            player = town.join(user_name, observer)
            interactables = town.interactable_models()
        try:
            await websocket.send_json(
                {
                    "type": "initialize",
                    "payload": {
                        "sessionToken": player.session_token,
                        "playerID": player.player_id,
                        "interactables": interactables,
                    },
                }
            )
            observer.start()
            while True:
                message = _decode_client_message(await websocket.receive_text())
                try:
                    _handle_client_message(town, player, message)
                except TownError as error:
                    observer("error", {"detail": str(error)})
        except WebSocketDisconnect:
            pass
        finally:
            town.leave(player)
            await observer.stop()

    return app


app = create_app()
