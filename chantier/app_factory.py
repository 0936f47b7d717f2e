'''组装 Flask App 的工厂（不启动服务）
负责注入配置、存储和时钟，注册蓝图与 error handler；run.py 和单元测试都从这里拿 app'''
# chantier/app_factory.py
from typing import Callable, Optional
from datetime import datetime

from flask import Flask
from sqlalchemy.orm import sessionmaker
from werkzeug.exceptions import HTTPException

from chantier.config import get_config
from chantier.db.enums import NotificationType
from chantier.db.init_db import init_db
from chantier.db.session import make_engine
from chantier.errors import ChantierError, DocumentGenerationError, StorageUnavailable
from chantier.logger import get_logger
from chantier.routes.common import EXTENSION_KEY, fail, get_clock, get_repos
from chantier.schemas.base import site_clock
from chantier.schemas.error_type import ErrorType
from chantier.services.notification_service import NotificationService
from chantier.store.entity_store import EntityStore
from chantier.store.ports import StoragePort
from chantier.store.repository import Repositories
from chantier.store.sql import SqlStorage

logger = get_logger(__name__)


def create_app(
    storage: Optional[StoragePort] = None,
    config_overrides: Optional[dict] = None,
    clock: Optional[Callable[[], datetime]] = None,
):
    """
    应用工厂函数
    :param storage: 存储端口；为空时使用 DATABASE_URL 指向的 SQL 库
    :param config_overrides: 覆盖 Config 中的同名项
    :param clock: 返回当前时间的函数，默认按 SITE_TIMEZONE（测试时注入固定时间）
    """
    config = get_config(**(config_overrides or {}))

    app = Flask(__name__)
    app.config.update(config.as_flask_config())

    if storage is None:
        engine = make_engine(config.DATABASE_URL)
        init_db(engine)
        storage = SqlStorage(sessionmaker(autocommit=False, autoflush=False, bind=engine))
        logger.info(f"Using database URL: {config.DATABASE_URL}")

    app.extensions[EXTENSION_KEY] = {
        "repos": Repositories(EntityStore(storage)),
        "clock": clock or site_clock(config.SITE_TIMEZONE),
    }

    # 注册蓝图
    from chantier.routes.catalog import catalog_bp
    from chantier.routes.planning import planning_bp
    from chantier.routes.projects import projects_bp
    from chantier.routes.receptions import receptions_bp
    from chantier.routes.reserves import reserves_bp
    from chantier.routes.search import search_bp
    from chantier.routes.settings import settings_bp

    app.register_blueprint(projects_bp)
    app.register_blueprint(catalog_bp)
    app.register_blueprint(reserves_bp)
    app.register_blueprint(planning_bp)
    app.register_blueprint(receptions_bp)
    app.register_blueprint(settings_bp)
    app.register_blueprint(search_bp)

    register_notification_check(app)
    register_error_handlers(app)

    return app


def register_notification_check(app):
    """每个请求前检查是否到了定期通知扫描的时间（默认 24 小时一次）"""

    @app.before_request
    def run_due_check():
        notifications = NotificationService(
            get_repos(),
            clock=get_clock(),
            check_interval_hours=app.config["NOTIFICATION_CHECK_HOURS"],
        )
        try:
            notifications.check_due()
        except StorageUnavailable as e:
            # 扫描推迟到存储恢复后，不影响本次请求
            logger.warning(f"Notification check skipped: {e.message}")


def register_error_handlers(app):
    """注册错误处理器：所有错误都以 ApiResult 返回"""

    @app.errorhandler(DocumentGenerationError)
    def document_error(error):
        # PDF / 二维码失败时同时留一条通知
        try:
            NotificationService(get_repos(), clock=get_clock()).add(
                NotificationType.error, "Erreur de génération", error.message,
            )
        except StorageUnavailable as e:
            logger.warning(f"Generation error notification not recorded: {e.message}")
        return fail(error.error_type, error.message, error.status_code)

    @app.errorhandler(ChantierError)
    def chantier_error(error):
        data = {"errors": error.errors} if getattr(error, "errors", None) else None
        if error.status_code >= 500:
            logger.error(f"{error.error_type.value}: {error.message}")
        return fail(error.error_type, error.message, error.status_code, data)

    @app.errorhandler(HTTPException)
    def http_error(error):
        error_type = ErrorType.NOT_FOUND if error.code == 404 else ErrorType.INPUT_ERROR
        return fail(error_type, error.description or error.name, error.code)

    @app.errorhandler(Exception)
    def internal_error(error):
        logger.exception(f"Unhandled error: {error}")
        return fail(ErrorType.SYSTEM_ERROR, "Internal server error", 500)
