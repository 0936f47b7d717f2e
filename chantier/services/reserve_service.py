# chantier/services/reserve_service.py
from datetime import date, datetime
from typing import Callable, Dict, List, Optional
from uuid import uuid4

from chantier.db.enums import Priority, ReserveStatus
from chantier.logger import get_logger
from chantier.schemas.base import utcnow
from chantier.schemas.entities import Reserve
from chantier.schemas.forms import ReserveForm
from chantier.services.lookup_service import LookupService
from chantier.store.repository import Repositories

logger = get_logger(__name__)


def sort_reserves(reserves: List[Reserve]) -> List[Reserve]:
    """Priority rank (urgent < normal < low), then oldest first."""
    return sorted(reserves, key=lambda r: (r.priority.rank, r.created_at))


class ReserveService:
    """
    Reserve (punch-list item) lifecycle: open -> in_progress -> resolved.

    Transitions only move forward; ``resolved_at`` is set exactly when the
    status becomes resolved. Foreign keys are not checked on write.
    """

    def __init__(
        self,
        repos: Repositories,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.repos = repos
        self.clock = clock
        self.lookup = LookupService(repos)

    def create(self, form: ReserveForm) -> Reserve:
        reserve = Reserve(
            id=str(uuid4()),
            status=ReserveStatus.open,
            created_at=self.clock(),
            **form.model_dump(),
        )
        self.repos.reserves.create(reserve)
        logger.info(f"Reserve created: {reserve.id} '{reserve.title}' ({reserve.priority.value})")
        return reserve

    def update(self, reserve_id: str, form: ReserveForm) -> Reserve:
        """
        Edit the descriptive fields of a reserve.
        Status, resolved_at and resolution_notes are only changed by the transitions.
        """
        reserve = self.repos.reserves.update(reserve_id, **form.model_dump())
        logger.info(f"Reserve updated: {reserve_id}")
        return reserve

    def delete(self, reserve_id: str) -> bool:
        deleted = self.repos.reserves.delete(reserve_id)
        if deleted:
            logger.info(f"Reserve deleted: {reserve_id}")
        return deleted

    # =========
    # 状态流转
    # =========
    def take_charge(self, reserve_id: str) -> Reserve:
        """open -> in_progress; any other state is returned unchanged."""
        reserve = self.repos.reserves.require(reserve_id)
        if reserve.status != ReserveStatus.open:
            return reserve
        reserve = self.repos.reserves.update(reserve_id, status=ReserveStatus.in_progress)
        logger.info(f"Reserve taken in charge: {reserve_id}")
        return reserve

    def resolve(self, reserve_id: str, notes: Optional[str] = None) -> Reserve:
        """
        open / in_progress -> resolved, stamping resolved_at and keeping the notes.
        :param notes: resolution notes; blank notes are stored as None
        A resolved reserve is terminal and returned unchanged.
        """
        reserve = self.repos.reserves.require(reserve_id)
        if reserve.status == ReserveStatus.resolved:
            return reserve
        reserve = self.repos.reserves.update(
            reserve_id,
            status=ReserveStatus.resolved,
            resolved_at=self.clock(),
            resolution_notes=(notes or "").strip() or None,
        )
        logger.info(f"Reserve resolved: {reserve_id}")
        return reserve

    # =========
    # 查询
    # =========
    def list(
        self,
        *,
        status: Optional[ReserveStatus] = None,
        priority: Optional[Priority] = None,
        project_id: Optional[str] = None,
        category_id: Optional[str] = None,
        contractor_id: Optional[str] = None,
        search: Optional[str] = None,
    ) -> List[Reserve]:
        """
        Filtered and sorted reserves.
        :param search: case-insensitive text matched against title, description,
            project name, block name, apartment number and category name
        """
        query = (search or "").strip().lower()
        result = []
        for reserve in self.repos.reserves.list():
            if status is not None and reserve.status != status:
                continue
            if priority is not None and reserve.priority != priority:
                continue
            if project_id and reserve.project_id != project_id:
                continue
            if category_id and reserve.category_id != category_id:
                continue
            if contractor_id and reserve.contractor_id != contractor_id:
                continue
            if query and not self._matches(reserve, query):
                continue
            result.append(reserve)
        return sort_reserves(result)

    def _matches(self, reserve: Reserve, query: str) -> bool:
        haystack = [
            reserve.title,
            reserve.description,
            self.lookup.project_name(reserve.project_id),
            self.lookup.block_name(reserve.block_id) or "",
            self.lookup.apartment_number(reserve.apartment_id) or "",
            self.lookup.category_name(reserve.category_id) or "",
        ]
        return any(query in text.lower() for text in haystack)

    def pending_resolution(self) -> List[Reserve]:
        """Reserves still to resolve (open or in progress), sorted."""
        return sort_reserves(
            self.repos.reserves.filter(lambda r: r.status != ReserveStatus.resolved)
        )

    def days_since_creation(self, reserve: Reserve, today: Optional[date] = None) -> int:
        today = today or self.clock().date()
        return (today - reserve.created_at.date()).days

    def collection_positions(self) -> Dict[str, int]:
        """1-based position of each reserve id in the stored collection."""
        return {r.id: i for i, r in enumerate(self.repos.reserves.list(), start=1)}

    def reserve_pv_number(self, reserve: Reserve, positions: Optional[Dict[str, int]] = None) -> str:
        """
        ``PV-YYYY-MM-NNN``: creation year/month and 1-based position in the collection.
        :param positions: result of ``collection_positions`` when numbering many reserves
        """
        if positions is None:
            positions = self.collection_positions()
        index = positions.get(reserve.id, 0)
        return f"PV-{reserve.created_at.year}-{reserve.created_at.month:02d}-{index:03d}"

    def describe(self, reserve: Reserve, positions: Optional[Dict[str, int]] = None) -> dict:
        """Record plus resolved display names, for API responses and exports."""
        return {
            **reserve.to_record(),
            "projectName": self.lookup.project_name(reserve.project_id),
            "blockName": self.lookup.block_name(reserve.block_id),
            "apartmentNumber": self.lookup.apartment_number(reserve.apartment_id),
            "categoryName": self.lookup.category_name(reserve.category_id),
            "contractorName": self.lookup.contractor_name(reserve.contractor_id),
            "pvNumber": self.reserve_pv_number(reserve, positions),
        }

    def describe_all(self, reserves: List[Reserve]) -> List[dict]:
        positions = self.collection_positions()
        return [self.describe(r, positions) for r in reserves]
