# chantier/tests/test_pv_generator.py
from datetime import date, datetime, timezone

import pytest

from chantier.db.enums import ReserveStatus
from chantier.schemas.entities import Project, Reserve
from chantier.services import pv_generator
from chantier.services.pv_generator import (
    PENALTY_MARKER,
    RESERVE_LIST_MARKER,
    PVData,
    PVScenario,
    compute_facts,
    render_pv,
)

GENERATED_AT = datetime(2024, 1, 10, 15, 4, 5, tzinfo=timezone.utc)


def project(end):
    return Project(id="p1", name="Résidence Alpha", start_date="2023-01-01", end_date=end)


def reserve(rid, **kwargs):
    values = dict(id=rid, project_id="p1", category_id="c1", contractor_id="k1", title=f"Réserve {rid}")
    values.update(kwargs)
    return Reserve(**values)


def render(facts):
    data = PVData(
        pv_number="PV-Résidence-Alpha-10-01-2024",
        project_name="Résidence Alpha",
        reception_date=date(2024, 1, 10),
        responsible_parties=["M. Alami", "Mme Benali"],
        facts=facts,
    )
    return render_pv(data, generated_at=GENERATED_AT)


def test_late_project_with_reserves():
    reserves = [reserve("r1", priority="urgent"), reserve("r2")]
    facts = compute_facts(project("2024-01-01"), reserves, today=date(2024, 1, 10))

    assert facts.has_reserves is True
    assert facts.reserve_count == 2
    assert facts.urgent_count == 1
    assert facts.is_on_time is False
    assert facts.delay_days == 9
    assert facts.scenario == PVScenario.conditional_late

    text = render(facts)
    assert RESERVE_LIST_MARKER in text
    assert PENALTY_MARKER in text
    assert "Un retard de 9 jours est constaté." in text
    assert "- Réserve r1" in text


def test_end_date_equal_to_today_is_on_time():
    facts = compute_facts(project("2024-01-10"), [], today=date(2024, 1, 10))
    assert facts.is_on_time is True
    assert facts.delay_days == 0


@pytest.mark.parametrize("has_reserves, end, scenario", [
    (False, "2024-02-01", PVScenario.accepted),
    (False, "2024-01-01", PVScenario.accepted_late),
    (True, "2024-02-01", PVScenario.conditional),
    (True, "2024-01-01", PVScenario.conditional_late),
])
def test_each_scenario_has_its_own_narrative(has_reserves, end, scenario):
    reserves = [reserve("r1")] if has_reserves else []
    facts = compute_facts(project(end), reserves, today=date(2024, 1, 10))
    assert facts.scenario == scenario

    text = render(facts)
    for other in PVScenario:
        assert (other.marker in text) == (other == scenario)
    assert (RESERVE_LIST_MARKER in text) == has_reserves
    assert (PENALTY_MARKER in text) == (not facts.is_on_time)


def test_only_open_reserves_of_selection_count():
    reserves = [
        reserve("r1", block_id="b1"),
        reserve("r2", block_id="b2"),
        reserve("r3", block_id="b1", status=ReserveStatus.in_progress),
        reserve("r4", block_id="b1", category_id="c2"),
        reserve("r5", project_id="p2", block_id="b1"),
    ]
    facts = compute_facts(
        project("2024-02-01"), reserves, today=date(2024, 1, 10), block_ids=["b1"], category_id="c1",
    )
    assert [r.id for r in facts.related_reserves] == ["r1"]


def test_unknown_project_counts_as_on_time():
    facts = compute_facts(None, [reserve("r1")], today=date(2024, 1, 10), project_id="p1")
    assert facts.is_on_time is True
    assert facts.reserve_count == 1


def test_pv_number_and_footer():
    assert pv_generator.pv_number("Tour A/B Nord", date(2024, 3, 5)) == "PV-Tour-A-B-Nord-05-03-2024"

    text = render(compute_facts(project("2024-02-01"), [], today=date(2024, 1, 10)))
    assert text.startswith("PROCÈS-VERBAL DE RÉCEPTION DE CHANTIER")
    assert "- M. Alami" in text
    assert text.endswith("Généré le 10/01/2024 15:04:05")


def test_rendering_is_deterministic():
    facts = compute_facts(project("2024-01-01"), [reserve("r1")], today=date(2024, 1, 10))
    assert render(facts) == render(facts)
