# chantier/tests/conftest.py
from datetime import datetime, timezone

import pytest

from chantier.app_factory import create_app
from chantier.db.enums import Priority, ProjectStatus, ReserveStatus, TaskStatus
from chantier.schemas.entities import (
    Block,
    Category,
    Contractor,
    Project,
    Reserve,
    Task,
)
from chantier.store.entity_store import EntityStore
from chantier.store.memory import InMemoryStorage
from chantier.store.repository import Repositories

# 所有测试共用的“当前时间”
FIXED_NOW = datetime(2024, 1, 10, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def clock():
    return lambda: FIXED_NOW


@pytest.fixture
def storage():
    return InMemoryStorage()


@pytest.fixture
def store(storage):
    return EntityStore(storage)


@pytest.fixture
def repos(store):
    return Repositories(store)


@pytest.fixture
def seeded(repos):
    """
    Two projects:
    - p1 ended on 2024-01-01 (late at FIXED_NOW), blocks b1 / b2
    - p2 ends on 2024-12-31, block b3
    """
    repos.projects.replace_all([
        Project(id="p1", name="Résidence Alpha", start_date="2023-06-01", end_date="2024-01-01",
                status=ProjectStatus.in_progress, created_at="2023-06-01T08:00:00Z"),
        Project(id="p2", name="Tour Beta", start_date="2023-09-01", end_date="2024-12-31",
                created_at="2023-09-01T08:00:00Z"),
    ])
    repos.blocks.replace_all([
        Block(id="b1", project_id="p1", name="Bloc A"),
        Block(id="b2", project_id="p1", name="Bloc B"),
        Block(id="b3", project_id="p2", name="Bloc C"),
    ])
    repos.categories.replace_all([
        Category(id="c1", name="Plomberie"),
        Category(id="c2", name="Électricité"),
        Category(id="c3", name="Peinture"),
    ])
    repos.contractors.replace_all([
        Contractor(id="k1", name="Plombiers Réunis", project_id="p1", category_ids=["c1", "c2"],
                   contract_start="2023-06-01", contract_end="2024-01-05"),
        Contractor(id="k2", name="Atlas Peinture", project_id="p2", category_ids=["c3"],
                   contract_start="2023-09-01", contract_end="2024-01-25"),
    ])
    repos.reserves.replace_all([
        Reserve(id="r1", project_id="p1", block_id="b1", category_id="c1", contractor_id="k1",
                title="Fuite salle de bain", priority=Priority.urgent, created_at="2024-01-02T09:00:00Z"),
        Reserve(id="r2", project_id="p1", block_id="b2", category_id="c2", contractor_id="k1",
                title="Prise défectueuse", created_at="2024-01-03T09:00:00Z"),
        Reserve(id="r3", project_id="p2", block_id="b3", category_id="c3", contractor_id="k2",
                title="Peinture écaillée", priority=Priority.low, status=ReserveStatus.resolved,
                created_at="2024-01-04T09:00:00Z", resolved_at="2024-01-06T09:00:00Z"),
    ])
    repos.tasks.replace_all([
        Task(id="t1", title="Plomberie Bloc A", project_id="p1", start_date="2024-01-01",
             end_date="2024-01-20", duration=19, priority=Priority.normal, status=TaskStatus.in_progress),
        Task(id="t2", title="Câblage", project_id="p1", start_date="2023-12-01",
             end_date="2024-01-05", duration=35, priority=Priority.urgent),
        Task(id="t3", title="Peinture hall", project_id="p2", start_date="2024-02-01",
             end_date="2024-03-15", duration=43, priority=Priority.low, status=TaskStatus.done),
    ])
    return repos


@pytest.fixture
def app(clock):
    app = create_app(storage=InMemoryStorage(), clock=clock)
    app.config["TESTING"] = True
    return app


@pytest.fixture
def client(app):
    return app.test_client()
