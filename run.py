# run.py
"""
run.py
标准 Flask 服务启动脚本（给开发者 / 运维 / CLI 用）
仅用于本地 / 内网启动 Flask 服务
"""
import os
import sys

from chantier.app_factory import create_app
from chantier.config import get_config
from chantier.db.auto_init import auto_init
from chantier.db.session import reset_engine
from chantier.logger import get_logger

logger = get_logger(__name__)


def get_app_base_dir():
    """
    获取程序根目录
    - 开发态：run.py 所在目录
    - PyInstaller：exe 所在目录
    """
    if getattr(sys, "frozen", False):
        return os.path.dirname(sys.executable)
    return os.path.abspath(os.path.dirname(__file__))


def configure_database():
    """
    未设置 DATABASE_URL 时，使用程序根目录下的 chantier.db
    """
    if not os.getenv("DATABASE_URL"):
        db_path = os.path.join(get_app_base_dir(), "chantier.db")
        os.environ["DATABASE_URL"] = f"sqlite:///{db_path}"  # 锁死数据库路径，防止打包后路径错乱
    reset_engine()
    logger.info(f"Using database: {os.environ['DATABASE_URL']}")


def main():
    # 0️ 统一数据库路径
    configure_database()

    # 1️ 启动前初始化数据库（建表 + 默认设置）
    auto_init()

    # 2️ 创建 Flask app
    config = get_config()
    app = create_app()
    logger.info(f"Routes:\n{app.url_map}")

    # 3️ 启动服务（单线程：存储层按进程缓存）
    app.run(host=config.HOST, port=config.PORT, debug=False, use_reloader=False, threaded=False)


if __name__ == "__main__":
    main()
