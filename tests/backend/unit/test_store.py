from concurrent.futures import ThreadPoolExecutor

import pytest

from coveytown.backend.errors import GeometryError
from coveytown.backend.models import MapObject
from coveytown.backend.store import TownsStore


MAP_OBJECTS = [
    MapObject(name="P1", type="PosterSessionArea", x=0, y=0, width=10, height=10),
    MapObject(name="C1", type="ConversationArea", x=20, y=0, width=10, height=10),
]


def test_create_town_registers_areas_in_map_order() -> None:
    store = TownsStore(server_salt="salt")

    town = store.create_town(friendly_name="Town", map_objects=MAP_OBJECTS)

    assert store.get_town(town.town_id) is town
    assert [area.id for area in town.areas] == ["P1", "C1"]


def test_create_town_rejects_incomplete_geometry() -> None:
    store = TownsStore(server_salt="salt")
    broken = [MapObject(name="P1", type="PosterSessionArea", x=0, y=0, width=10)]

    with pytest.raises(GeometryError):
        store.create_town(friendly_name="Town", map_objects=broken)

    assert store.list_towns() == []


def test_create_town_rejects_duplicate_area_ids() -> None:
    store = TownsStore(server_salt="salt")

    with pytest.raises(GeometryError):
        store.create_town(friendly_name="Town", map_objects=[MAP_OBJECTS[0], MAP_OBJECTS[0]])


def test_list_towns_only_returns_public_towns_with_occupancy() -> None:
    store = TownsStore(server_salt="salt")
    public = store.create_town(friendly_name="Public", map_objects=MAP_OBJECTS)
    store.create_town(friendly_name="Private", map_objects=MAP_OBJECTS, is_publicly_listed=False)
    public.join("alice", lambda event_name, payload: None)

    listings = store.list_towns()

    assert len(listings) == 1
    assert listings[0].town_id == public.town_id
    assert listings[0].friendly_name == "Public"
    assert listings[0].current_occupancy == 1


def test_stores_are_independent() -> None:
    first = TownsStore(server_salt="salt")
    second = TownsStore(server_salt="salt")

    town = first.create_town(friendly_name="Town", map_objects=MAP_OBJECTS)

    assert second.get_town(town.town_id) is None


def test_delete_town_tears_down_observers() -> None:
    store = TownsStore(server_salt="salt")
    town = store.create_town(friendly_name="Town", map_objects=MAP_OBJECTS)
    town.join("alice", lambda event_name, payload: None)

    assert store.delete_town(town.town_id) is True
    assert store.delete_town(town.town_id) is False
    assert store.get_town(town.town_id) is None
    assert town.broadcaster.observer_count == 0
    assert town.occupancy == 0


def test_clear_removes_every_town() -> None:
    store = TownsStore(server_salt="salt")
    store.create_town(friendly_name="A", map_objects=MAP_OBJECTS)
    store.create_town(friendly_name="B", map_objects=MAP_OBJECTS)

    store.clear()

    assert store.list_towns() == []


def test_registry_tolerates_concurrent_create_and_list() -> None:
    store = TownsStore(server_salt="salt")

    def create(index: int) -> None:
        store.create_town(friendly_name=f"Town {index}", map_objects=MAP_OBJECTS)

    def list_repeatedly(_: int) -> None:
        for _ in range(20):
            store.list_towns()

    with ThreadPoolExecutor(max_workers=8) as pool:
        futures = [pool.submit(create, index) for index in range(50)]
        futures += [pool.submit(list_repeatedly, index) for index in range(10)]
        for future in futures:
            future.result()

    assert len(store.list_towns()) == 50
