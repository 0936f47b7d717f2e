# chantier/config.py
import os
from dotenv import load_dotenv

# 加载环境变量
load_dotenv()

# 项目根目录（绝对路径）
BASE_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))


class Config:
    """Runtime configuration read from the environment (.env supported)."""

    def __init__(self, **overrides):
        secret_key = os.getenv("SECRET_KEY", "dev-secret-key-change-in-production")
        if isinstance(secret_key, bytes):
            secret_key = secret_key.decode("utf-8")
        self.SECRET_KEY = secret_key

        default_db_url = f"sqlite:///{os.path.join(BASE_DIR, 'chantier.db')}"
        self.DATABASE_URL = os.getenv("DATABASE_URL", default_db_url)

        self.LOG_DIR = os.getenv("LOG_DIR", "logs")
        self.LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

        self.HOST = os.getenv("HOST", "0.0.0.0")
        self.PORT = int(os.getenv("PORT", 5000))

        # PDF 标签语言：fr / en / es
        self.PDF_LANGUAGE = os.getenv("PDF_LANGUAGE", "fr")
        self.NOTIFICATION_CHECK_HOURS = int(os.getenv("NOTIFICATION_CHECK_HOURS", 24))
        # 工地所在时区（IANA 名称），决定“今天”的日期；为空时使用系统本地时区
        self.SITE_TIMEZONE = os.getenv("SITE_TIMEZONE", "")

        for name, value in overrides.items():
            setattr(self, name, value)

    def as_flask_config(self) -> dict:
        return {name: value for name, value in vars(self).items() if name.isupper()}


def get_config(**overrides) -> Config:
    return Config(**overrides)
