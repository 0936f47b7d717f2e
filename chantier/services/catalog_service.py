# chantier/services/catalog_service.py
import math
from datetime import date, datetime, time, timezone
from typing import Callable, List, Optional
from uuid import uuid4

from chantier.db.enums import ContractorStatus
from chantier.logger import get_logger
from chantier.schemas.base import utcnow
from chantier.schemas.entities import Category, Contractor
from chantier.schemas.forms import CategoryForm, ContractorForm
from chantier.services.lookup_service import LookupService
from chantier.store.repository import Repositories

logger = get_logger(__name__)

EXPIRING_SOON_DAYS = 30


class CatalogService:
    """Work categories and contractors (with their contract dates)."""

    def __init__(
        self,
        repos: Repositories,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.repos = repos
        self.clock = clock
        self.lookup = LookupService(repos)

    # =========
    # 工种
    # =========
    def list_categories(self) -> List[Category]:
        return self.repos.categories.list()

    def create_category(self, form: CategoryForm) -> Category:
        category = Category(id=str(uuid4()), created_at=self.clock(), **form.model_dump())
        self.repos.categories.create(category)
        logger.info(f"Category created: {category.id} '{category.name}'")
        return category

    def update_category(self, category_id: str, form: CategoryForm) -> Category:
        return self.repos.categories.update(category_id, **form.model_dump())

    def delete_category(self, category_id: str) -> bool:
        deleted = self.repos.categories.delete(category_id)
        if deleted:
            logger.info(f"Category deleted: {category_id}")
        return deleted

    # =========
    # 分包商
    # =========
    def list_contractors(self, project_id: Optional[str] = None) -> List[Contractor]:
        return self.repos.contractors.filter(lambda c: not project_id or c.project_id == project_id)

    def create_contractor(self, form: ContractorForm) -> Contractor:
        contractor = Contractor(id=str(uuid4()), created_at=self.clock(), **form.model_dump())
        self.repos.contractors.create(contractor)
        logger.info(f"Contractor created: {contractor.id} '{contractor.name}'")
        return contractor

    def update_contractor(self, contractor_id: str, form: ContractorForm) -> Contractor:
        return self.repos.contractors.update(contractor_id, **form.model_dump())

    def delete_contractor(self, contractor_id: str) -> bool:
        deleted = self.repos.contractors.delete(contractor_id)
        if deleted:
            logger.info(f"Contractor deleted: {contractor_id}")
        return deleted

    # =========
    # 合同期限
    # =========
    def _now(self, now: Optional[datetime]) -> datetime:
        return now or self.clock()

    def is_expired(self, contractor: Contractor, today: Optional[date] = None) -> bool:
        """Derived state: the contract end date is in the past (stored status is not consulted)."""
        return contractor.contract_end < (today or self.clock().date())

    def days_until_expiration(self, contractor: Contractor, now: Optional[datetime] = None) -> int:
        """Days left until the contract end (midnight UTC), rounded up; negative once expired."""
        end = datetime.combine(contractor.contract_end, time.min, tzinfo=timezone.utc)
        return math.ceil((end - self._now(now)).total_seconds() / 86400)

    def is_expiring_soon(self, contractor: Contractor, now: Optional[datetime] = None) -> bool:
        days = self.days_until_expiration(contractor, now)
        return 0 < days <= EXPIRING_SOON_DAYS and contractor.status == ContractorStatus.active

    def describe(self, contractor: Contractor) -> dict:
        return {
            **contractor.to_record(),
            "projectName": self.lookup.project_name(contractor.project_id),
            "categoryNames": [self.lookup.category_name(c) for c in contractor.category_ids],
            "expired": self.is_expired(contractor),
            "daysUntilExpiration": self.days_until_expiration(contractor),
            "expiringSoon": self.is_expiring_soon(contractor),
        }
