# chantier/services/notification_service.py
from datetime import date, datetime, timedelta
from typing import Callable, List, Optional
from uuid import uuid4

from chantier.db.enums import CollectionKey, NotificationType, ReserveStatus
from chantier.logger import get_logger
from chantier.schemas.base import utcnow
from chantier.schemas.entities import Notification, NotificationSettings
from chantier.store.repository import Repositories

logger = get_logger(__name__)

MAX_NOTIFICATIONS = 50
WARNING_WINDOW_DAYS = 30
DEFAULT_CHECK_HOURS = 24


class NotificationService:
    """
    In-app notifications, newest first.

    ``check`` scans projects, contracts and open reserves; ``check_due`` runs it
    at most once per ``check_interval_hours`` and is meant to be called on every
    request instead of a timer.
    """

    def __init__(
        self,
        repos: Repositories,
        clock: Callable[[], datetime] = utcnow,
        check_interval_hours: int = DEFAULT_CHECK_HOURS,
    ):
        self.repos = repos
        self.clock = clock
        self.check_interval = timedelta(hours=check_interval_hours)

    def list(self) -> List[Notification]:
        return self.repos.notifications.list()

    def unread_count(self) -> int:
        return sum(1 for n in self.list() if not n.read)

    def add(
        self,
        type: NotificationType,
        title: str,
        description: Optional[str] = None,
    ) -> Notification:
        notification = Notification(
            id=str(uuid4()),
            type=type,
            title=title,
            description=description,
            timestamp=self.clock(),
            read=False,
        )
        keep_all = not self.get_settings().auto_delete

        def _prepend(records):
            records = [notification.to_record()] + list(records or [])
            return records if keep_all else records[:MAX_NOTIFICATIONS]

        self.repos.store.set(CollectionKey.notifications, _prepend, default=[])
        logger.info(f"Notification [{type.value}] {title}")
        return notification

    def mark_as_read(self, notification_id: str) -> Notification:
        return self.repos.notifications.update(notification_id, read=True)

    def mark_all_as_read(self) -> int:
        notifications = self.list()
        self.repos.notifications.replace_all(n.replace(read=True) for n in notifications)
        return len(notifications)

    def delete(self, notification_id: str) -> bool:
        return self.repos.notifications.delete(notification_id)

    def clear_all(self):
        self.repos.notifications.clear()
        logger.info("Notifications cleared")

    # =========
    # 通知设置
    # =========
    def get_settings(self) -> NotificationSettings:
        return self.repos.notification_settings.get()

    def update_settings(self, **changes) -> NotificationSettings:
        changes = {k: v for k, v in changes.items() if v is not None}
        return self.repos.notification_settings.update(**changes)

    # =========
    # 定期检查
    # =========
    def _unread_titles(self) -> set:
        return {n.title for n in self.list() if not n.read}

    def _add_once(self, existing: set, added: List[Notification], type: NotificationType, title: str, description: str):
        if title in existing:
            return
        existing.add(title)
        added.append(self.add(type, title, description))

    def check(self, today: Optional[date] = None) -> List[Notification]:
        """
        Raise notifications for late / ending projects, expired / expiring contracts
        and open reserves. A title already present and unread is not repeated.
        :return: the notifications added by this run
        """
        today = today or self.clock().date()
        existing = self._unread_titles()
        added: List[Notification] = []

        for project in self.repos.projects.list():
            days = (project.end_date - today).days
            if days < 0:
                self._add_once(
                    existing, added, NotificationType.error,
                    f"Projet en retard : {project.name}",
                    f"Ce projet a dépassé sa date de fin de {abs(days)} jours.",
                )
            elif days <= WARNING_WINDOW_DAYS:
                self._add_once(
                    existing, added, NotificationType.warning,
                    f"Projet proche de la fin : {project.name}",
                    f"Ce projet se termine dans {days} jours.",
                )

        for contractor in self.repos.contractors.list():
            days = (contractor.contract_end - today).days
            if days < 0:
                self._add_once(
                    existing, added, NotificationType.error,
                    f"Contrat expiré : {contractor.name}",
                    f"Le contrat de ce sous-traitant a expiré il y a {abs(days)} jours.",
                )
            elif days <= WARNING_WINDOW_DAYS:
                self._add_once(
                    existing, added, NotificationType.warning,
                    f"Contrat proche de l'expiration : {contractor.name}",
                    f"Le contrat de ce sous-traitant expire dans {days} jours.",
                )

        for reserve in self.repos.reserves.list():
            if reserve.status == ReserveStatus.open:
                self._add_once(
                    existing, added, NotificationType.warning,
                    f"Réserve ouverte : {reserve.title}",
                    "Cette réserve est toujours ouverte et nécessite une attention.",
                )

        if added:
            logger.info(f"Notification check: {len(added)} new notification(s)")
        return added

    def check_due(self, now: Optional[datetime] = None) -> bool:
        """Run ``check`` when the last run is older than the interval. Returns True when it ran."""
        now = now or self.clock()
        if not self.repos.settings.get().notifications:
            return False
        last = self.get_settings().last_check_at
        if last is not None and now - last < self.check_interval:
            return False
        self.check(now.date())
        self.repos.notification_settings.update(last_check_at=now)
        return True
