# config.py
import os
from datetime import timedelta
from types import MappingProxyType

from dotenv import load_dotenv

load_dotenv()

BASE_DIR = os.path.abspath(os.path.dirname(__file__))
INSTANCE_DIR = os.path.join(BASE_DIR, "instance")

# 必填项：配置键 -> 环境变量名
REQUIRED_SETTINGS = {
    "SQLALCHEMY_DATABASE_URI": "DATABASE_URL",
    "SECRET_KEY": "SECRET_KEY",
    "JWT_SECRET_KEY": "JWT_SECRET_KEY",
}


class ConfigError(RuntimeError):
    pass


def _db_url(raw):
    if raw and raw.startswith("postgres://"):
        return raw.replace("postgres://", "postgresql+psycopg2://", 1)
    return raw


def _env_bool(name, default=False):
    val = os.getenv(name)
    if val is None:
        return default
    return val.strip().lower() in ("1", "true", "yes", "on")


def _env_list(name, default):
    val = os.getenv(name)
    if not val:
        return list(default)
    return [x.strip() for x in val.split(",") if x.strip()]


class Config:
    SECRET_KEY = os.getenv("SECRET_KEY")
    SQLALCHEMY_DATABASE_URI = _db_url(os.getenv("DATABASE_URL"))
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ENGINE_OPTIONS = {"pool_pre_ping": True, "pool_recycle": 300}

    # ---- 管理后台会话（JWT 放在 HttpOnly cookie 里）----
    JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY")
    JWT_TOKEN_LOCATION = ["cookies"]
    JWT_ACCESS_COOKIE_PATH = "/"
    JWT_COOKIE_SECURE = _env_bool("JWT_COOKIE_SECURE", False)
    JWT_COOKIE_SAMESITE = "Lax"
    JWT_COOKIE_CSRF_PROTECT = True
    JWT_CSRF_CHECK_FORM = True
    ACCESS_EXPIRES_HOURS = int(os.getenv("ACCESS_EXPIRES_HOURS", "8"))
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(hours=ACCESS_EXPIRES_HOURS)

    # ---- 对象存储（本地媒体目录）----
    MEDIA_ROOT = os.getenv("MEDIA_ROOT", os.path.join(INSTANCE_DIR, "media"))
    MEDIA_URL_PREFIX = os.getenv("MEDIA_URL_PREFIX", "/media")
    STORAGE_BUCKET = os.getenv("STORAGE_BUCKET", "case-studies")
    ALLOWED_IMAGE_EXTENSIONS = ("png", "jpg", "jpeg", "gif", "webp", "svg", "avif")
    MAX_CONTENT_LENGTH = 10 * 1024 * 1024

    # ---- 公开页面 ----
    REVALIDATE_SECONDS = int(os.getenv("REVALIDATE_SECONDS", "60"))
    RELATED_WINDOW = 10
    RELATED_LIMIT = 3
    CORS_ORIGINS = _env_list("CORS_ORIGINS", ["http://localhost:3000", "http://127.0.0.1:3000"])

    SITE_NAME = os.getenv("SITE_NAME", "Case Studies")
    SITE_URL = os.getenv("SITE_URL", "http://localhost:5000")
    SITE_DESCRIPTION = os.getenv(
        "SITE_DESCRIPTION",
        "Proven success stories and measurable results from our automation projects.",
    )
    SITE_KEYWORDS = (
        "AI Automation",
        "Case Studies",
        "Client Success Stories",
        "Voice AI",
        "Real Estate Automation",
        "AI Agents",
        "Business Automation",
        "Enterprise SaaS",
    )
    SITE_TWITTER = os.getenv("SITE_TWITTER", "")

    # 作者表：只读映射，模板和表单都从 app.config 读取
    AUTHORS = MappingProxyType({
        "team": MappingProxyType({
            "name": "Editorial Team",
            "position": "Automation Agency",
            "avatar": "/static/authors/team.svg",
        }),
    })
    DEFAULT_AUTHOR = "team"

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    JSON_AS_ASCII = False


def validate_config(config) -> None:
    """启动前检查必填配置，缺任何一项都直接抛错，不对外提供服务。"""
    missing = [env for key, env in REQUIRED_SETTINGS.items() if not config.get(key)]
    if missing:
        raise ConfigError(
            "Missing required configuration: "
            + ", ".join(missing)
            + ". Set them in the environment or in a .env file before starting the app."
        )
