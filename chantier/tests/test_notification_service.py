# chantier/tests/test_notification_service.py
from datetime import date, timedelta

from chantier.db.enums import NotificationType
from chantier.services.notification_service import MAX_NOTIFICATIONS, NotificationService
from chantier.tests.conftest import FIXED_NOW


def test_add_prepends_and_counts_unread(repos, clock):
    notifications = NotificationService(repos, clock=clock)
    first = notifications.add(NotificationType.info, "Premier")
    second = notifications.add(NotificationType.success, "Second", "détail")

    assert [n.id for n in notifications.list()] == [second.id, first.id]
    assert notifications.unread_count() == 2

    notifications.mark_as_read(first.id)
    assert notifications.unread_count() == 1
    assert notifications.mark_all_as_read() == 2
    assert notifications.unread_count() == 0

    assert notifications.delete(first.id) is True
    notifications.clear_all()
    assert notifications.list() == []


def test_auto_delete_keeps_latest(repos, clock):
    notifications = NotificationService(repos, clock=clock)
    for i in range(MAX_NOTIFICATIONS + 5):
        notifications.add(NotificationType.info, f"N{i}")
    items = notifications.list()
    assert len(items) == MAX_NOTIFICATIONS
    assert items[0].title == f"N{MAX_NOTIFICATIONS + 4}"

    notifications.update_settings(auto_delete=False)
    notifications.add(NotificationType.info, "extra")
    assert len(notifications.list()) == MAX_NOTIFICATIONS + 1


def test_check_raises_expected_notifications(seeded, clock):
    notifications = NotificationService(seeded, clock=clock)
    added = notifications.check()
    titles = {n.title for n in added}

    assert "Projet en retard : Résidence Alpha" in titles
    assert "Contrat expiré : Plombiers Réunis" in titles
    assert "Contrat proche de l'expiration : Atlas Peinture" in titles
    assert "Réserve ouverte : Fuite salle de bain" in titles
    assert "Réserve ouverte : Prise défectueuse" in titles
    # 已解决的保留项不提醒；项目 p2 还有将近一年
    assert "Réserve ouverte : Peinture écaillée" not in titles
    assert not any("Tour Beta" in t for t in titles)

    late = next(n for n in added if n.title.startswith("Projet en retard"))
    assert late.type == NotificationType.error
    assert late.description == "Ce projet a dépassé sa date de fin de 9 jours."


def test_check_does_not_repeat_unread_titles(seeded, clock):
    notifications = NotificationService(seeded, clock=clock)
    first = notifications.check()
    assert notifications.check() == []

    notifications.mark_all_as_read()
    assert len(notifications.check()) == len(first)


def test_check_due_respects_interval_and_setting(seeded, clock):
    notifications = NotificationService(seeded, clock=clock, check_interval_hours=24)
    assert notifications.check_due() is True
    assert notifications.get_settings().last_check_at == FIXED_NOW
    assert notifications.check_due(FIXED_NOW + timedelta(hours=23)) is False
    assert notifications.check_due(FIXED_NOW + timedelta(hours=24)) is True

    seeded.settings.update(notifications=False)
    assert notifications.check_due(FIXED_NOW + timedelta(days=5)) is False


def test_check_with_explicit_day(seeded, clock):
    added = NotificationService(seeded, clock=clock).check(date(2023, 12, 15))
    titles = {n.title for n in added}
    assert "Projet proche de la fin : Résidence Alpha" in titles
    assert "Contrat proche de l'expiration : Plombiers Réunis" in titles
