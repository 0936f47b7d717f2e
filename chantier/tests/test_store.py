# chantier/tests/test_store.py
import json

import pytest
from sqlalchemy.orm import sessionmaker

from chantier.db.enums import CollectionKey, ContractorStatus, Priority, ReserveStatus
from chantier.db.init_db import init_db
from chantier.db.session import make_engine
from chantier.errors import NotFoundError, StorageError, StorageUnavailable
from chantier.schemas.entities import AppSettings, Category, Reserve
from chantier.store.entity_store import EntityStore
from chantier.store.memory import InMemoryStorage
from chantier.store.repository import Repositories
from chantier.store.sql import SqlStorage


def test_get_returns_default_and_copies(store):
    assert store.get(CollectionKey.projects, []) == []

    store.set(CollectionKey.projects, [{"id": "p1", "name": "A"}])
    value = store.get(CollectionKey.projects, [])
    value[0]["name"] = "changed"
    # 调用方修改副本不影响缓存
    assert store.get(CollectionKey.projects, [])[0]["name"] == "A"


def test_set_with_function(store):
    store.set("counter", 1)
    store.set("counter", lambda current: current + 1, default=0)
    assert store.get("counter") == 2


def test_invalid_json_falls_back_to_default():
    storage = InMemoryStorage(initial={"projects": "{not json"})
    store = EntityStore(storage)
    assert store.get(CollectionKey.projects, []) == []


def test_quota_exceeded_keeps_memory_and_warns():
    storage = InMemoryStorage(quota_bytes=64)
    store = EntityStore(storage)

    store.set("notes", ["x" * 200])

    assert store.get("notes") == ["x" * 200]
    assert storage.load("notes") is None
    warnings = store.pop_warnings()
    assert len(warnings) == 1
    assert "notes" in warnings[0]
    assert store.pop_warnings() == []


def test_reload_reads_storage_again(storage, store):
    store.set("settings", {"theme": "dark"})
    storage.save("settings", json.dumps({"theme": "light"}))
    assert store.get("settings")["theme"] == "dark"
    store.reload()
    assert store.get("settings")["theme"] == "light"


def test_repository_skips_unreadable_records(storage):
    storage.save("categories", json.dumps([
        {"id": "c1", "name": "Plomberie"},
        {"id": "broken"},
        "not a record",
    ]))
    repos = Repositories(EntityStore(storage))

    assert [c.id for c in repos.categories.list()] == ["c1"]

    # 写操作不会丢掉读不出来的记录
    repos.categories.create(Category(id="c2", name="Peinture"))
    raw = json.loads(storage.load("categories"))
    assert len(raw) == 4
    assert raw[1] == {"id": "broken"}


def test_repository_update_and_require(repos):
    repos.categories.create(Category(id="c1", name="Plomberie"))
    updated = repos.categories.update("c1", name="Plomberie générale")
    assert updated.name == "Plomberie générale"
    assert repos.categories.get("c1").name == "Plomberie générale"

    with pytest.raises(NotFoundError):
        repos.categories.require("missing")
    assert repos.categories.get(None) is None
    assert repos.categories.delete("missing") is False


def test_records_are_stored_camel_case(storage, repos):
    repos.reserves.create(Reserve(
        id="r1", project_id="p1", category_id="c1", contractor_id="k1", title="Fissure",
    ))
    raw = json.loads(storage.load("reserves"))[0]
    assert raw["projectId"] == "p1"
    assert "blockId" not in raw  # None 不写入


def test_legacy_french_values_are_accepted(repos, storage):
    storage.save("reserves", json.dumps([{
        "id": "r1", "projectId": "p1", "categoryId": "c1", "contractorId": "k1",
        "title": "Ancienne réserve", "status": "en_cours", "priority": "faible",
        "createdAt": "2023-05-01T10:00:00",
    }]))
    reserve = repos.reserves.get("r1")
    assert reserve.status == ReserveStatus.in_progress
    assert reserve.priority == Priority.low
    # 无时区时间按 UTC
    assert reserve.created_at.tzinfo is not None
    assert ContractorStatus("actif") == ContractorStatus.active


def test_singleton_defaults_and_update(repos):
    assert repos.settings.get() == AppSettings()
    repos.settings.update(compact_mode=True)
    assert repos.settings.get().compact_mode is True


def test_sql_storage_round_trip():
    engine = make_engine("sqlite://")
    init_db(engine)
    storage = SqlStorage(sessionmaker(bind=engine))

    assert storage.load("projects") is None
    storage.save("projects", "[]")
    storage.save("projects", '[{"id": "p1"}]')
    assert storage.load("projects") == '[{"id": "p1"}]'
    assert storage.keys() == ["projects"]

    storage.delete("projects")
    assert storage.load("projects") is None
    assert storage.keys() == []


class FlakyStorage(InMemoryStorage):
    """Fails the next ``failures`` loads, then behaves normally."""

    def __init__(self, failures=1, **kwargs):
        super().__init__(**kwargs)
        self.failures = failures

    def load(self, key):
        if self.failures:
            self.failures -= 1
            raise StorageError("transient read failure")
        return super().load(key)


def test_failed_read_is_not_cached():
    storage = FlakyStorage(initial={"categories": json.dumps([{"id": "c1", "name": "Plomberie"}])})
    store = EntityStore(storage)

    assert store.get(CollectionKey.categories, []) == []
    assert "categories" in store.pop_warnings()[0]
    # 下一次读取重新访问存储
    assert store.get(CollectionKey.categories, []) == [{"id": "c1", "name": "Plomberie"}]


def test_write_over_unreadable_collection_is_refused():
    saved = [{"id": f"c{i}", "name": f"Lot {i}"} for i in range(3)]
    storage = FlakyStorage(initial={"categories": json.dumps(saved)})
    repos = Repositories(EntityStore(storage))

    with pytest.raises(StorageUnavailable):
        repos.categories.create(Category(id="new", name="Nouveau"))
    assert json.loads(storage.load("categories")) == saved

    # 存储恢复后写入正常合并
    repos.categories.create(Category(id="new", name="Nouveau"))
    assert [r["id"] for r in json.loads(storage.load("categories"))] == ["c0", "c1", "c2", "new"]


def test_singleton_update_over_unreadable_value_is_refused():
    storage = FlakyStorage(initial={"settings": json.dumps({"theme": "dark", "compactMode": True})})
    repos = Repositories(EntityStore(storage))

    with pytest.raises(StorageUnavailable):
        repos.settings.update(language="en")
    assert json.loads(storage.load("settings")) == {"theme": "dark", "compactMode": True}

    updated = repos.settings.update(language="en")
    assert updated.theme.value == "dark"
    assert updated.compact_mode is True
