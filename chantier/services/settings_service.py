# chantier/services/settings_service.py
from typing import Dict

from chantier.db.enums import ENTITY_COLLECTIONS
from chantier.errors import ConfirmationError
from chantier.logger import get_logger
from chantier.schemas.entities import AppSettings
from chantier.services.demo_data import build_demo_data
from chantier.store.repository import Repositories

logger = get_logger(__name__)

ERASE_CONFIRMATION_CODE = "1270"


class SettingsService:
    """Application preferences and whole-dataset operations (demo load, erase)."""

    def __init__(self, repos: Repositories):
        self.repos = repos

    def get(self) -> AppSettings:
        return self.repos.settings.get()

    def update(self, **changes) -> AppSettings:
        changes = {k: v for k, v in changes.items() if v is not None}
        settings = self.repos.settings.update(**changes)
        logger.info(f"Settings updated: {sorted(changes)}")
        return settings

    def reset(self) -> AppSettings:
        """Back to light theme, notifications on, French, normal density."""
        settings = self.repos.settings.save(AppSettings())
        logger.info("Settings reset to defaults")
        return settings

    def erase_all(self, code: str) -> None:
        """Empty the eight entity collections; settings and notifications are kept."""
        if (code or "").strip() != ERASE_CONFIRMATION_CODE:
            raise ConfirmationError("Code de confirmation incorrect")
        for key in ENTITY_COLLECTIONS:
            self.repos.collection(key).clear()
        logger.warning("All project data erased")

    def load_demo_data(self) -> Dict[str, int]:
        """Replace the eight entity collections with the demo data set."""
        counts = {}
        for key, entities in build_demo_data().items():
            self.repos.collection(key).replace_all(entities)
            counts[key.value] = len(entities)
        logger.info(f"Demo data loaded: {counts}")
        return counts
