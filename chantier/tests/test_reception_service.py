# chantier/tests/test_reception_service.py
from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest

from chantier.errors import NotFoundError
from chantier.schemas.base import site_clock
from chantier.schemas.entities import Reception
from chantier.schemas.forms import ReceptionForm, parse_form
from chantier.services.pv_generator import PENALTY_MARKER, RESERVE_LIST_MARKER
from chantier.services.reception_service import ReceptionService
from chantier.tests.conftest import FIXED_NOW


def test_create_late_reception_with_reserves(seeded, clock):
    form = parse_form(ReceptionForm, {
        "projectId": "p1",
        "blockIds": ["b1", "b2"],
        "categoryId": "all",
        "contractorId": "",
        "responsibleParties": "M. Alami, , Mme Benali",
    })
    reception = ReceptionService(seeded, clock=clock).create(form)

    assert reception.pv_number == "PV-Résidence-Alpha-10-01-2024"
    assert reception.block_id is None  # 多个楼栋时不记录
    assert reception.category_id is None
    assert reception.responsible_parties == ["M. Alami", "Mme Benali"]
    assert reception.has_reserves is True
    assert reception.reserve_count == 2
    assert reception.urgent_count == 1
    assert reception.is_on_time is False
    assert reception.delay_days == 9
    assert reception.pv_generated is True
    assert reception.date == FIXED_NOW
    assert RESERVE_LIST_MARKER in reception.pv_content
    assert PENALTY_MARKER in reception.pv_content
    assert "Blocs: Bloc A, Bloc B" in reception.pv_content
    assert seeded.receptions.get(reception.id) == reception


def test_single_block_and_category_narrow_the_reserves(seeded, clock):
    form = parse_form(ReceptionForm, {"projectId": "p1", "blockIds": ["b2"], "categoryId": "c1"})
    reception = ReceptionService(seeded, clock=clock).create(form)
    assert reception.block_id == "b2"
    assert reception.has_reserves is False
    assert "Catégorie: Plomberie" in reception.pv_content


def test_on_time_project_without_open_reserves(seeded, clock):
    form = parse_form(ReceptionForm, {"projectId": "p2"})
    reception = ReceptionService(seeded, clock=clock).create(form)
    assert reception.is_on_time is True
    assert reception.has_reserves is False
    assert "réception définitive sans réserve" in reception.pv_content


def test_list_most_recent_first_and_edit(seeded, clock):
    seeded.receptions.replace_all([
        Reception(id="old", project_id="p1", date="2023-12-01T10:00:00Z"),
        Reception(id="new", project_id="p2", date="2024-01-05T10:00:00Z"),
    ])
    service = ReceptionService(seeded, clock=clock)
    assert [r.id for r in service.list()] == ["new", "old"]

    updated = service.update_responsible_parties("old", ["Bureau Véritas"])
    assert updated.responsible_parties == ["Bureau Véritas"]
    assert service.describe(updated)["projectName"] == "Résidence Alpha"

    assert service.delete("old") is True
    with pytest.raises(NotFoundError):
        service.get("old")


def test_qr_payload(seeded, clock):
    seeded.receptions.create(Reception(
        id="rec1", project_id="p1", pv_number="PV-X-05-01-2024", date="2024-01-05T10:00:00Z",
    ))
    payload = ReceptionService(seeded, clock=clock).qr_payload("rec1")
    assert payload == {
        "pvNumber": "PV-X-05-01-2024",
        "date": "05/01/2024",
        "id": "rec1",
        "type": "pv",
        "title": "Réception Résidence Alpha",
        "timestamp": int(FIXED_NOW.timestamp() * 1000),
    }


def test_reception_date_follows_site_timezone(seeded):
    # 巴黎已是 2024-01-10 00:30，UTC 仍是 2024-01-09
    paris_now = datetime(2024, 1, 9, 23, 30, tzinfo=timezone.utc).astimezone(ZoneInfo("Europe/Paris"))
    reception = ReceptionService(seeded, clock=lambda: paris_now).create(
        parse_form(ReceptionForm, {"projectId": "p1"})
    )
    assert reception.pv_number == "PV-Résidence-Alpha-10-01-2024"
    assert reception.delay_days == 9


def test_site_clock_is_timezone_aware():
    paris = site_clock("Europe/Paris")()
    assert paris.utcoffset() in (timedelta(hours=1), timedelta(hours=2))
    assert site_clock()().tzinfo is not None
