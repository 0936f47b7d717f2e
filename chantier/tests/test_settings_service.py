# chantier/tests/test_settings_service.py
import pytest

from chantier.db.enums import Language, NotificationType, Theme
from chantier.errors import ConfirmationError
from chantier.schemas.entities import AppSettings
from chantier.services.notification_service import NotificationService
from chantier.services.search_service import SearchService
from chantier.services.settings_service import ERASE_CONFIRMATION_CODE, SettingsService


def test_update_and_reset(repos):
    settings = SettingsService(repos)
    updated = settings.update(theme=Theme.dark, language=Language.en, compact_mode=None)
    assert updated.theme == Theme.dark
    assert updated.language == Language.en
    assert updated.compact_mode is False

    assert settings.reset() == AppSettings()


def test_erase_requires_code(seeded, clock):
    settings = SettingsService(seeded)
    NotificationService(seeded, clock=clock).add(NotificationType.info, "Gardée")
    seeded.settings.update(theme=Theme.dark)

    with pytest.raises(ConfirmationError):
        settings.erase_all("0000")
    assert len(seeded.projects.list()) == 2

    settings.erase_all(f" {ERASE_CONFIRMATION_CODE} ")
    assert seeded.projects.list() == []
    assert seeded.reserves.list() == []
    assert seeded.tasks.list() == []
    # 设置和通知保留
    assert seeded.settings.get().theme == Theme.dark
    assert len(seeded.notifications.list()) == 1


def test_load_demo_data(repos):
    counts = SettingsService(repos).load_demo_data()
    assert counts["projects"] == 3
    assert counts["reserves"] == 4
    assert {p.id for p in repos.projects.list()} == {"proj1", "proj2", "proj3"}
    assert repos.contractors.get("cont1").category_ids


def test_search_groups_by_type(seeded):
    search = SearchService(seeded)
    results = search.suggest("bloc")
    assert [s.type for s in results] == ["block", "block", "block"]
    assert results[0].subtitle == "Bloc - Résidence Alpha"

    mixed = search.suggest("peinture")
    assert [(s.type, s.id) for s in mixed] == [("category", "c3"), ("reserve", "r3")]

    assert search.suggest("   ") == []
    assert len(search.suggest("e", limit=2)) == 2
