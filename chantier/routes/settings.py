# chantier/routes/settings.py
from flask import Blueprint, request

from chantier.db.enums import NotificationType
from chantier.errors import NotFoundError
from chantier.routes.common import attachment, get_clock, ok, payload, service
from chantier.schemas.forms import EraseForm, NotificationSettingsForm, SettingsForm, parse_form
from chantier.services.export_service import ExportService
from chantier.services.notification_service import NotificationService
from chantier.services.settings_service import SettingsService

settings_bp = Blueprint("settings", __name__, url_prefix="/api")


# =========
# 设置
# =========
@settings_bp.route("/settings", methods=["GET"])
def get_settings():
    return ok(service(SettingsService).get())


@settings_bp.route("/settings", methods=["PUT", "PATCH"])
def update_settings():
    form = parse_form(SettingsForm, payload())
    return ok(service(SettingsService).update(**form.model_dump()))


@settings_bp.route("/settings/reset", methods=["POST"])
def reset_settings():
    return ok(service(SettingsService).reset())


# =========
# 数据管理
# =========
@settings_bp.route("/backup", methods=["GET"])
def export_backup():
    content = service(ExportService).export_backup_json()
    filename = f"chantier_backup_{get_clock()().strftime('%Y-%m-%d')}.json"
    return attachment(content.encode("utf-8"), "application/json", filename)


@settings_bp.route("/backup", methods=["POST"])
def import_backup():
    """Restore from an uploaded ``file`` field or a raw JSON body."""
    upload = request.files.get("file")
    document = upload.read() if upload is not None else request.get_data()
    written = service(ExportService).import_backup(document)
    service(NotificationService).add(
        NotificationType.success,
        "Sauvegarde restaurée",
        f"{sum(written.values())} élément(s) importé(s)",
    )
    return ok(written)


@settings_bp.route("/demo-data", methods=["POST"])
def load_demo_data():
    return ok(service(SettingsService).load_demo_data())


@settings_bp.route("/erase", methods=["POST"])
def erase_all():
    form = parse_form(EraseForm, payload())
    service(SettingsService).erase_all(form.code)
    return ok({"erased": True})


# =========
# 通知
# =========
@settings_bp.route("/notifications", methods=["GET"])
def list_notifications():
    notifications = service(NotificationService)
    return ok({
        "items": notifications.list(),
        "unreadCount": notifications.unread_count(),
    })


@settings_bp.route("/notifications/check", methods=["POST"])
def check_notifications():
    return ok(service(NotificationService).check())


@settings_bp.route("/notifications/<notification_id>/read", methods=["POST"])
def mark_as_read(notification_id):
    return ok(service(NotificationService).mark_as_read(notification_id))


@settings_bp.route("/notifications/read-all", methods=["POST"])
def mark_all_as_read():
    return ok({"updated": service(NotificationService).mark_all_as_read()})


@settings_bp.route("/notifications/<notification_id>", methods=["DELETE"])
def delete_notification(notification_id):
    if not service(NotificationService).delete(notification_id):
        raise NotFoundError("Notification", notification_id)
    return ok({"id": notification_id})


@settings_bp.route("/notifications", methods=["DELETE"])
def clear_notifications():
    service(NotificationService).clear_all()
    return ok({"cleared": True})


@settings_bp.route("/notifications/settings", methods=["GET"])
def get_notification_settings():
    return ok(service(NotificationService).get_settings())


@settings_bp.route("/notifications/settings", methods=["PUT", "PATCH"])
def update_notification_settings():
    form = parse_form(NotificationSettingsForm, payload())
    return ok(service(NotificationService).update_settings(**form.model_dump()))
