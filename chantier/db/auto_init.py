"""
数据库自动初始化检查模块
在应用启动时自动检查并执行必要的初始化步骤
"""
import json

from sqlalchemy import inspect

from chantier.db.enums import CollectionKey
from chantier.db.init_db import init_db
from chantier.db.session import get_engine, get_session
from chantier.logger import get_logger
from chantier.models.collection_record import CollectionRecord
from chantier.schemas.entities import AppSettings, NotificationSettings

logger = get_logger(__name__)


def check_tables_exist() -> bool:
    """检查数据库表是否存在"""
    try:
        engine = get_engine()
        inspector = inspect(engine)
        tables = inspector.get_table_names()
        return CollectionRecord.__tablename__ in tables
    except Exception as e:
        logger.warning(f"检查数据库表失败: {e}")
        return False


def seed_default_settings():
    """写入默认的应用设置和通知设置（已存在则跳过）"""
    defaults = {
        CollectionKey.settings.value: AppSettings().to_record(),
        CollectionKey.notification_settings.value: NotificationSettings().to_record(),
    }
    db = get_session()
    try:
        created = []
        for key, record in defaults.items():
            if db.get(CollectionRecord, key) is None:
                db.add(CollectionRecord(key=key, payload=json.dumps(record, ensure_ascii=False)))
                created.append(key)
        db.commit()
        if created:
            logger.info(f"默认设置已写入: {', '.join(created)}")
        else:
            logger.info("默认设置已存在，跳过")
    except Exception as e:
        db.rollback()
        logger.error(f"写入默认设置失败: {e}")
        raise
    finally:
        db.close()


def auto_init():
    """
    自动初始化检查
    如果数据库未初始化或缺少默认设置，自动执行初始化
    """
    logger.info("检查数据库初始化状态...")

    if not check_tables_exist():
        logger.info("数据库表不存在，正在创建...")
        try:
            init_db()
            logger.info("数据库表创建成功")
        except Exception as e:
            logger.error(f"数据库表创建失败: {e}")
            raise
    else:
        logger.info("数据库表已存在")

    seed_default_settings()
    logger.info("数据库初始化检查完成")


if __name__ == "__main__":
    auto_init()
