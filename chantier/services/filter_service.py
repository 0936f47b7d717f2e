# chantier/services/filter_service.py
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from chantier.schemas.entities import Block, Category, Contractor, Project
from chantier.store.repository import Repositories


class FilterSelection(BaseModel):
    """Current choices of the reception form (None = not selected / all)."""

    model_config = ConfigDict(frozen=True)

    project_id: Optional[str] = None
    block_ids: List[str] = Field(default_factory=list)
    category_id: Optional[str] = None
    contractor_id: Optional[str] = None


class FilterService:
    """
    Cascading filter resolver over project / category / contractor.

    Every method is a pure function of the current collections, linear in
    their size. An empty result is an empty list, never an error.

    Categories combine their two rules with a union while contractors use an
    intersection; the asymmetry is kept as-is.
    """

    def __init__(self, repos: Repositories):
        self.repos = repos

    def available_categories(
        self,
        project_id: Optional[str] = None,
        contractor_id: Optional[str] = None,
    ) -> List[Category]:
        """
        :param project_id: keep categories used by a reserve of this project
        :param contractor_id: keep the categories the contractor carries
        Both given: union of the two rules. Neither: all categories.
        """
        categories = self.repos.categories.list()
        if not project_id and not contractor_id:
            return categories

        wanted = set()
        if project_id:
            wanted.update(
                r.category_id for r in self.repos.reserves.list() if r.project_id == project_id
            )
        if contractor_id:
            contractor = self.repos.contractors.get(contractor_id)
            if contractor is not None:
                wanted.update(contractor.category_ids)
        return [c for c in categories if c.id in wanted]

    def available_contractors(
        self,
        project_id: Optional[str] = None,
        category_id: Optional[str] = None,
    ) -> List[Contractor]:
        """Contractors matching the project AND carrying the category; each test applies only when given."""
        result = []
        for contractor in self.repos.contractors.list():
            if project_id and contractor.project_id != project_id:
                continue
            if category_id and category_id not in contractor.category_ids:
                continue
            result.append(contractor)
        return result

    def available_projects(
        self,
        category_id: Optional[str] = None,
        contractor_id: Optional[str] = None,
    ) -> List[Project]:
        """Union of projects having a reserve in the category and the contractor's project."""
        projects = self.repos.projects.list()
        if not category_id and not contractor_id:
            return projects

        wanted = set()
        if category_id:
            wanted.update(
                r.project_id for r in self.repos.reserves.list() if r.category_id == category_id
            )
        if contractor_id:
            contractor = self.repos.contractors.get(contractor_id)
            if contractor is not None:
                wanted.add(contractor.project_id)
        return [p for p in projects if p.id in wanted]

    def available_blocks(self, project_id: Optional[str] = None) -> List[Block]:
        if not project_id:
            return []
        return [b for b in self.repos.blocks.list() if b.project_id == project_id]

    # =========
    # 级联选择：某一维度变化时修正其它维度
    # =========
    def on_project_change(self, selection: FilterSelection, project_id: Optional[str]) -> FilterSelection:
        # 切换项目时清空已选楼栋
        return selection.model_copy(update=dict(project_id=project_id or None, block_ids=[]))

    def on_category_change(self, selection: FilterSelection, category_id: Optional[str]) -> FilterSelection:
        updated = selection.model_copy(update=dict(category_id=category_id or None))
        if updated.contractor_id and updated.category_id:
            contractor = self.repos.contractors.get(updated.contractor_id)
            if contractor is not None and updated.category_id not in contractor.category_ids:
                updated = updated.model_copy(update=dict(contractor_id=None))
        return updated

    def on_contractor_change(self, selection: FilterSelection, contractor_id: Optional[str]) -> FilterSelection:
        updated = selection.model_copy(update=dict(contractor_id=contractor_id or None))
        contractor = self.repos.contractors.get(updated.contractor_id)
        if contractor is not None and contractor.category_ids:
            # 自动选中分包商的第一个工种
            updated = updated.model_copy(update=dict(category_id=contractor.category_ids[0]))
        return updated

    def options(self, selection: FilterSelection) -> dict:
        """All option lists for a selection, as served to the reception form."""
        return {
            "projects": self.available_projects(selection.category_id, selection.contractor_id),
            "blocks": self.available_blocks(selection.project_id),
            "categories": self.available_categories(selection.project_id, selection.contractor_id),
            "contractors": self.available_contractors(selection.project_id, selection.category_id),
        }
