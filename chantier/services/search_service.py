# chantier/services/search_service.py
from typing import List

from pydantic import BaseModel, ConfigDict

from chantier.services.lookup_service import UNKNOWN_PROJECT
from chantier.store.repository import Repositories

MAX_SUGGESTIONS = 8


class SearchSuggestion(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    type: str  # project / block / apartment / category / reserve
    title: str
    subtitle: str


class SearchService:
    """Global search box suggestions."""

    def __init__(self, repos: Repositories):
        self.repos = repos

    def suggest(self, query: str, limit: int = MAX_SUGGESTIONS) -> List[SearchSuggestion]:
        """
        Case-insensitive substring match, grouped by type in a fixed order
        (projects, blocks, apartments, categories, reserves), at most ``limit`` results.
        """
        q = (query or "").strip().lower()
        if not q:
            return []

        projects = {p.id: p for p in self.repos.projects.list()}
        blocks = {b.id: b for b in self.repos.blocks.list()}
        suggestions: List[SearchSuggestion] = []

        for project in projects.values():
            if q in project.name.lower():
                suggestions.append(SearchSuggestion(
                    id=project.id, type="project", title=project.name, subtitle="Projet",
                ))

        for block in blocks.values():
            if q in block.name.lower():
                project = projects.get(block.project_id)
                suggestions.append(SearchSuggestion(
                    id=block.id, type="block", title=block.name,
                    subtitle=f"Bloc - {project.name if project else UNKNOWN_PROJECT}",
                ))

        for apartment in self.repos.apartments.list():
            if q in apartment.number.lower():
                block = blocks.get(apartment.block_id)
                project = projects.get(block.project_id) if block else None
                suggestions.append(SearchSuggestion(
                    id=apartment.id, type="apartment", title=f"Appt {apartment.number}",
                    subtitle=f"{project.name if project else 'Projet'} / {block.name if block else 'Bloc'}",
                ))

        for category in self.repos.categories.list():
            if q in category.name.lower():
                suggestions.append(SearchSuggestion(
                    id=category.id, type="category", title=category.name, subtitle="Catégorie",
                ))

        for reserve in self.repos.reserves.list():
            if q in reserve.title.lower() or q in reserve.description.lower():
                project = projects.get(reserve.project_id)
                suggestions.append(SearchSuggestion(
                    id=reserve.id, type="reserve", title=reserve.title,
                    subtitle=f"Réserve - {project.name if project else UNKNOWN_PROJECT}",
                ))

        return suggestions[:limit]
