# chantier/services/reception_service.py
from datetime import datetime
from typing import Callable, List
from uuid import uuid4

from chantier.logger import get_logger
from chantier.schemas.base import utcnow
from chantier.schemas.entities import Reception
from chantier.schemas.forms import ReceptionForm
from chantier.services import pv_generator
from chantier.services.document_service import DocumentService
from chantier.services.lookup_service import LookupService
from chantier.store.repository import Repositories

logger = get_logger(__name__)


class ReceptionService:
    """Creates receptions with their derived facts and generated PV text."""

    def __init__(
        self,
        repos: Repositories,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.repos = repos
        self.clock = clock
        self.lookup = LookupService(repos)

    def build_pv(self, form: ReceptionForm) -> pv_generator.PVData:
        """Resolve the form selection into PV data (facts + display names)."""
        now = self.clock()
        today = now.date()
        project = self.repos.projects.get(form.project_id)
        facts = pv_generator.compute_facts(
            project,
            self.repos.reserves.list(),
            today=today,
            block_ids=form.block_ids,
            category_id=form.category_id,
            project_id=form.project_id,
        )
        project_name = self.lookup.project_name(form.project_id)
        return pv_generator.PVData(
            pv_number=pv_generator.pv_number(project_name, today),
            project_name=project_name,
            block_names=[self.lookup.block_name(b) for b in form.block_ids],
            category_name=self.lookup.category_name(form.category_id),
            contractor_name=self.lookup.contractor_name(form.contractor_id),
            reception_date=today,
            responsible_parties=form.responsible_parties,
            facts=facts,
        )

    def create(self, form: ReceptionForm) -> Reception:
        """
        Compute the facts, render the PV and store the reception.
        :param form: project, optional blocks / category / contractor, responsible parties
        """
        now = self.clock()
        data = self.build_pv(form)
        facts = data.facts
        reception = Reception(
            id=str(uuid4()),
            project_id=form.project_id,
            # 只选中一个楼栋时才记录 block_id
            block_id=form.block_ids[0] if len(form.block_ids) == 1 else None,
            category_id=form.category_id,
            contractor_id=form.contractor_id,
            pv_number=data.pv_number,
            date=now,
            responsible_parties=form.responsible_parties,
            has_reserves=facts.has_reserves,
            reserve_count=facts.reserve_count,
            urgent_count=facts.urgent_count,
            is_on_time=facts.is_on_time,
            delay_days=facts.delay_days,
            pv_generated=True,
            pv_content=pv_generator.render_pv(data, generated_at=now),
            created_at=now,
        )
        self.repos.receptions.create(reception)
        logger.info(
            f"Reception created: {reception.id} project={reception.project_id} "
            f"scenario={facts.scenario.value} reserves={facts.reserve_count} delay={facts.delay_days}"
        )
        return reception

    def update_responsible_parties(self, reception_id: str, parties: List[str]) -> Reception:
        reception = self.repos.receptions.update(reception_id, responsible_parties=parties)
        logger.info(f"Reception updated: {reception_id}")
        return reception

    def delete(self, reception_id: str) -> bool:
        deleted = self.repos.receptions.delete(reception_id)
        if deleted:
            logger.info(f"Reception deleted: {reception_id}")
        return deleted

    def list(self) -> List[Reception]:
        """Most recent first."""
        return sorted(self.repos.receptions.list(), key=lambda r: r.date, reverse=True)

    def get(self, reception_id: str) -> Reception:
        return self.repos.receptions.require(reception_id)

    def describe(self, reception: Reception) -> dict:
        return {
            **reception.to_record(),
            "projectName": self.lookup.project_name(reception.project_id),
            "blockName": self.lookup.block_name(reception.block_id),
            "categoryName": self.lookup.category_name(reception.category_id),
            "contractorName": self.lookup.contractor_name(reception.contractor_id),
        }

    def qr_payload(self, reception_id: str) -> dict:
        """QR object ``{pvNumber, date, id, type, title, timestamp}`` of a stored reception."""
        reception = self.get(reception_id)
        return DocumentService(self.repos, clock=self.clock).reception_qr_payload(reception)
