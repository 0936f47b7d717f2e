# chantier/services/lookup_service.py
from typing import Optional

from chantier.store.repository import Repositories

# 悬空外键的占位显示值
UNKNOWN_PROJECT = "Projet inconnu"
UNKNOWN_BLOCK = "Bloc inconnu"
UNKNOWN_APARTMENT = "Appartement inconnu"
UNKNOWN_CATEGORY = "Catégorie inconnue"
UNKNOWN_CONTRACTOR = "Sous-traitant inconnu"


class LookupService:
    """
    Display-name resolution for foreign keys.

    Deleting a project/block/apartment leaves dependent records in place, so
    every lookup tolerates a dangling id and returns a sentinel label. An empty
    optional id (no block selected, ...) resolves to None.
    """

    def __init__(self, repos: Repositories):
        self.repos = repos

    def project_name(self, project_id: Optional[str]) -> str:
        project = self.repos.projects.get(project_id)
        return project.name if project else UNKNOWN_PROJECT

    def block_name(self, block_id: Optional[str]) -> Optional[str]:
        if not block_id:
            return None
        block = self.repos.blocks.get(block_id)
        return block.name if block else UNKNOWN_BLOCK

    def apartment_number(self, apartment_id: Optional[str]) -> Optional[str]:
        if not apartment_id:
            return None
        apartment = self.repos.apartments.get(apartment_id)
        return apartment.number if apartment else UNKNOWN_APARTMENT

    def category_name(self, category_id: Optional[str]) -> Optional[str]:
        if not category_id:
            return None
        category = self.repos.categories.get(category_id)
        return category.name if category else UNKNOWN_CATEGORY

    def contractor_name(self, contractor_id: Optional[str]) -> Optional[str]:
        if not contractor_id:
            return None
        contractor = self.repos.contractors.get(contractor_id)
        return contractor.name if contractor else UNKNOWN_CONTRACTOR
