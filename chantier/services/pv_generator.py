# chantier/services/pv_generator.py
"""
Procès-verbal (PV) de réception: derived facts and text rendering.

Pure functions: the same inputs and ``generated_at`` always give the same text.
"""
from datetime import date, datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from chantier.db.enums import Priority, ReserveStatus
from chantier.schemas.entities import Project, Reserve

DATE_FORMAT = "%d/%m/%Y"
DATETIME_FORMAT = "%d/%m/%Y %H:%M:%S"

CURE_PERIOD_DAYS = 15

# 段落中固定出现的短语，用于校验叙述选择
RESERVE_LIST_MARKER = "Des réserves ont été émises"
PENALTY_MARKER = "pénalités de retard"


class PVScenario(str, Enum):
    """The four narratives, selected by (has_reserves, is_on_time)."""

    accepted = "accepted"                  # 无保留项，按期
    accepted_late = "accepted_late"        # 无保留项，逾期
    conditional = "conditional"            # 有保留项，按期
    conditional_late = "conditional_late"  # 有保留项，逾期

    @classmethod
    def select(cls, has_reserves: bool, is_on_time: bool) -> "PVScenario":
        if has_reserves:
            return cls.conditional if is_on_time else cls.conditional_late
        return cls.accepted if is_on_time else cls.accepted_late

    @property
    def marker(self) -> str:
        """Phrase found in this scenario's text and in no other."""
        return SCENARIO_MARKERS[self]


SCENARIO_MARKERS = {
    PVScenario.accepted: "réception définitive sans réserve",
    PVScenario.accepted_late: "sans réserve malgré le retard constaté",
    PVScenario.conditional: "avec réserves, les délais contractuels ayant été respectés",
    PVScenario.conditional_late: "avec réserves et hors délai contractuel",
}


class ReceptionFacts(BaseModel):
    model_config = ConfigDict(frozen=True)

    related_reserves: List[Reserve] = Field(default_factory=list)
    has_reserves: bool
    reserve_count: int
    urgent_count: int
    is_on_time: bool
    delay_days: int

    @property
    def scenario(self) -> PVScenario:
        return PVScenario.select(self.has_reserves, self.is_on_time)


class PVData(BaseModel):
    """Everything printed in a PV, already resolved to display values."""

    model_config = ConfigDict(frozen=True)

    pv_number: str
    project_name: str
    block_names: List[str] = Field(default_factory=list)
    category_name: Optional[str] = None
    contractor_name: Optional[str] = None
    reception_date: date
    responsible_parties: List[str] = Field(default_factory=list)
    facts: ReceptionFacts


def related_reserves(
    reserves: List[Reserve],
    *,
    project_id: str,
    block_ids: Optional[List[str]] = None,
    category_id: Optional[str] = None,
) -> List[Reserve]:
    """Open reserves of the project, narrowed to the selected blocks and category when given."""
    result = []
    for reserve in reserves:
        if reserve.project_id != project_id or reserve.status != ReserveStatus.open:
            continue
        if block_ids and reserve.block_id not in block_ids:
            continue
        if category_id and reserve.category_id != category_id:
            continue
        result.append(reserve)
    return result


def compute_facts(
    project: Optional[Project],
    reserves: List[Reserve],
    *,
    today: date,
    block_ids: Optional[List[str]] = None,
    category_id: Optional[str] = None,
    project_id: Optional[str] = None,
) -> ReceptionFacts:
    """
    Derive the handover facts.
    :param project: the project; None when the id is dangling (then it counts as ending today)
    :param reserves: the whole reserve collection
    :param project_id: id to match reserves against when ``project`` is None
    """
    project_id = project.id if project is not None else project_id
    related = related_reserves(
        reserves,
        project_id=project_id,
        block_ids=block_ids,
        category_id=category_id,
    )
    end_date = project.end_date if project is not None else today
    is_on_time = today <= end_date
    delay_days = 0 if is_on_time else (today - end_date).days
    return ReceptionFacts(
        related_reserves=related,
        has_reserves=len(related) > 0,
        reserve_count=len(related),
        urgent_count=sum(1 for r in related if r.priority == Priority.urgent),
        is_on_time=is_on_time,
        delay_days=delay_days,
    )


def pv_number(project_name: str, day: date) -> str:
    """``PV-<project name>-<dd-mm-yyyy>`` with spaces and slashes turned into hyphens."""
    name = project_name.replace(" ", "-").replace("/", "-")
    return f"PV-{name}-{day.strftime(DATE_FORMAT).replace('/', '-')}"


# =========
# 文本模板
# =========
def _header(data: PVData) -> str:
    reception_date = data.reception_date.strftime(DATE_FORMAT)
    lines = [
        "PROCÈS-VERBAL DE RÉCEPTION DE CHANTIER",
        "",
        f"ID du PV: {data.pv_number}",
        f"Projet: {data.project_name}",
    ]
    if data.block_names:
        lines.append(f"Blocs: {', '.join(data.block_names)}")
    if data.category_name:
        lines.append(f"Catégorie: {data.category_name}")
    if data.contractor_name:
        lines.append(f"Sous-traitant: {data.contractor_name}")
    lines.append(f"Date de réception: {reception_date}")
    lines.append("")
    lines.append("PARTIES PRÉSENTES:")
    if data.responsible_parties:
        lines.extend(f"- {party}" for party in data.responsible_parties)
    else:
        lines.append("Non spécifiées")
    return "\n".join(lines)


def _introduction(data: PVData) -> str:
    reception_date = data.reception_date.strftime(DATE_FORMAT)
    return (
        f"Suite à la visite du chantier effectuée en date du {reception_date}, "
        "il a été procédé à la vérification des travaux réalisés.\n"
        "Après examen des ouvrages et conformément aux dispositions contractuelles, "
        "il est constaté ce qui suit :"
    )


def _acceptance(late: bool) -> str:
    conformity = "Les travaux sont jugés conformes au marché et aux règles de l’art.\n"
    if late:
        return conformity + (
            "Le Maître d’Ouvrage prononce la réception sans réserve malgré le retard constaté."
        )
    return conformity + (
        "Le Maître d’Ouvrage prononce la réception définitive sans réserve, "
        "les délais contractuels ayant été respectés."
    )


def _reserve_listing(facts: ReceptionFacts, late: bool) -> str:
    titles = "\n".join(f"- {r.title}" for r in facts.related_reserves) or "Aucune réserve spécifique indiquée"
    if late:
        verdict = "La réception est prononcée avec réserves et hors délai contractuel."
    else:
        verdict = "La réception est prononcée avec réserves, les délais contractuels ayant été respectés."
    return (
        f"{RESERVE_LIST_MARKER} concernant les éléments suivants :\n"
        f"{titles}\n"
        f"L’Entreprise s’engage à lever ces réserves dans un délai de {CURE_PERIOD_DAYS} jours "
        "à compter de ce jour.\n"
        f"{verdict}"
    )


def _penalty(facts: ReceptionFacts) -> str:
    return (
        "Les travaux ont été exécutés avec retard par rapport au délai contractuel fixé.\n"
        f"Un retard de {facts.delay_days} jours est constaté.\n"
        f"Les dispositions contractuelles relatives aux {PENALTY_MARKER} pourront être "
        "appliquées par le Maître d’Ouvrage."
    )


CLOSURE = """Le présent procès-verbal est établi pour servir et valoir ce que de droit.

Signatures :

Maître d’Ouvrage : _________________________
Maître d’Œuvre : _________________________
Entreprise exécutante : _________________________
Bureau de contrôle (si présent) : _________________________"""


def narrative(facts: ReceptionFacts) -> List[str]:
    """Body paragraphs for the scenario of ``facts``."""
    scenario = facts.scenario
    if scenario == PVScenario.accepted:
        return [_acceptance(late=False)]
    if scenario == PVScenario.accepted_late:
        return [_acceptance(late=True), _penalty(facts)]
    if scenario == PVScenario.conditional:
        return [_reserve_listing(facts, late=False)]
    if scenario == PVScenario.conditional_late:
        return [_reserve_listing(facts, late=True), _penalty(facts)]
    raise ValueError(f"Unhandled PV scenario: {scenario}")


def render_pv(data: PVData, generated_at: datetime) -> str:
    sections = [_header(data), _introduction(data), *narrative(data.facts), CLOSURE]
    return "\n\n".join(sections) + f"\n\nGénéré le {generated_at.strftime(DATETIME_FORMAT)}"
