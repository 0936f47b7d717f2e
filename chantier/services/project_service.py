# chantier/services/project_service.py
from datetime import date, datetime
from typing import Callable, Dict, List, Optional
from uuid import uuid4

from chantier.db.enums import ContractorStatus, Priority, ProjectStatus, ReserveStatus, TaskStatus
from chantier.logger import get_logger
from chantier.schemas.base import utcnow
from chantier.schemas.entities import Apartment, Block, Project
from chantier.schemas.forms import ApartmentForm, BlockForm, ProjectForm
from chantier.services.reserve_service import sort_reserves
from chantier.store.repository import Repositories

logger = get_logger(__name__)

DASHBOARD_LIST_SIZE = 5


class ProjectService:
    """
    Projects, their blocks and apartments, plus the dashboard figures.

    Deleting a project, block or apartment never touches dependent records;
    readers resolve the dangling ids to "unknown" labels.
    """

    def __init__(
        self,
        repos: Repositories,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.repos = repos
        self.clock = clock

    # =========
    # 项目
    # =========
    def list_projects(self) -> List[Project]:
        return self.repos.projects.list()

    def get_project(self, project_id: str) -> Project:
        return self.repos.projects.require(project_id)

    def create_project(self, form: ProjectForm) -> Project:
        project = Project(id=str(uuid4()), created_at=self.clock(), **form.model_dump())
        self.repos.projects.create(project)
        logger.info(f"Project created: {project.id} '{project.name}'")
        return project

    def update_project(self, project_id: str, form: ProjectForm) -> Project:
        project = self.repos.projects.update(project_id, **form.model_dump())
        logger.info(f"Project updated: {project_id}")
        return project

    def delete_project(self, project_id: str) -> bool:
        deleted = self.repos.projects.delete(project_id)
        if deleted:
            logger.info(f"Project deleted: {project_id} (dependent records kept)")
        return deleted

    # =========
    # 楼栋
    # =========
    def blocks_of(self, project_id: str) -> List[Block]:
        return self.repos.blocks.filter(lambda b: b.project_id == project_id)

    def create_block(self, form: BlockForm) -> Block:
        block = Block(id=str(uuid4()), created_at=self.clock(), **form.model_dump())
        self.repos.blocks.create(block)
        logger.info(f"Block created: {block.id} '{block.name}' in project {block.project_id}")
        return block

    def update_block(self, block_id: str, form: BlockForm) -> Block:
        return self.repos.blocks.update(block_id, **form.model_dump())

    def delete_block(self, block_id: str) -> bool:
        deleted = self.repos.blocks.delete(block_id)
        if deleted:
            logger.info(f"Block deleted: {block_id} (dependent records kept)")
        return deleted

    # =========
    # 房间
    # =========
    def apartments_of(self, block_id: str) -> List[Apartment]:
        return self.repos.apartments.filter(lambda a: a.block_id == block_id)

    def _apartment_values(self, form: ApartmentForm) -> dict:
        values = form.model_dump()
        # project_id 冗余自所属楼栋
        block = self.repos.blocks.get(form.block_id)
        values["project_id"] = block.project_id if block else (form.project_id or "")
        return values

    def create_apartment(self, form: ApartmentForm) -> Apartment:
        apartment = Apartment(id=str(uuid4()), created_at=self.clock(), **self._apartment_values(form))
        self.repos.apartments.create(apartment)
        logger.info(f"Apartment created: {apartment.id} '{apartment.number}' in block {apartment.block_id}")
        return apartment

    def update_apartment(self, apartment_id: str, form: ApartmentForm) -> Apartment:
        return self.repos.apartments.update(apartment_id, **self._apartment_values(form))

    def delete_apartment(self, apartment_id: str) -> bool:
        deleted = self.repos.apartments.delete(apartment_id)
        if deleted:
            logger.info(f"Apartment deleted: {apartment_id}")
        return deleted

    # =========
    # 汇总
    # =========
    def project_summary(self, project_id: str) -> Dict[str, object]:
        project = self.get_project(project_id)
        reserves = self.repos.reserves.filter(lambda r: r.project_id == project_id)
        reserves_by_status = {status.value: 0 for status in ReserveStatus}
        for reserve in reserves:
            reserves_by_status[reserve.status.value] += 1
        return {
            "project": project.to_record(),
            "blocks": len(self.blocks_of(project_id)),
            "apartments": len(self.repos.apartments.filter(lambda a: a.project_id == project_id)),
            "reserves": reserves_by_status,
            "tasks": len(self.repos.tasks.filter(lambda t: t.project_id == project_id)),
            "receptions": len(self.repos.receptions.filter(lambda r: r.project_id == project_id)),
        }

    def dashboard(self, today: Optional[date] = None) -> Dict[str, object]:
        """
        Headline figures plus the first projects and the urgent open reserves.
        :param today: reference day for expired contracts (defaults to the clock)
        """
        today = today or self.clock().date()
        projects = self.repos.projects.list()
        reserves = self.repos.reserves.list()
        tasks = self.repos.tasks.list()
        contractors = self.repos.contractors.list()

        urgent_open = [
            r for r in reserves
            if r.priority == Priority.urgent and r.status == ReserveStatus.open
        ]
        stats = {
            "totalProjects": len(projects),
            "activeProjects": sum(1 for p in projects if p.status == ProjectStatus.in_progress),
            "openReserves": sum(1 for r in reserves if r.status == ReserveStatus.open),
            "urgentReserves": len(urgent_open),
            "activeTasks": sum(1 for t in tasks if t.status == TaskStatus.in_progress),
            "expiredContracts": sum(
                1 for c in contractors
                if c.contract_end < today and c.status == ContractorStatus.active
            ),
        }
        return {
            "stats": stats,
            "recentProjects": [p.to_record() for p in projects[:DASHBOARD_LIST_SIZE]],
            "urgentReserves": [r.to_record() for r in sort_reserves(urgent_open)[:DASHBOARD_LIST_SIZE]],
        }
