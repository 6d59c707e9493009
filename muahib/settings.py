import os
from pathlib import Path
import environ

BASE_DIR = Path(__file__).resolve().parent.parent

env = environ.Env(
    DEBUG=(bool, True),
    SECRET_KEY=(str, "change-me"),
    ALLOWED_HOSTS=(list, ["*"]),
    CURRENCY_SYMBOL=(str, "₦"),
    SITE_DOMAIN=(str, "muahib.com"),
    BRAND_TAGLINE=(str, "Quality gadgets, ordered on WhatsApp"),
    BRAND_LOGO=(str, "img/logo.svg"),
    # WhatsApp ordering
    STORE_WHATSAPP_NUMBER=(str, "2348012345678"),
    DEFAULT_COUNTRY_CODE=(str, "+234"),
    # Visitor popup
    POPUP_COOLDOWN_DAYS=(int, 30),
    POPUP_DELAY_MS=(int, 2000),
    WHATSAPP_DUPLICATE_WINDOW_HOURS=(int, 24),
    # Upload limits in bytes
    MAX_IMAGE_UPLOAD_SIZE=(int, 5 * 1024 * 1024),
    MAX_VIDEO_UPLOAD_SIZE=(int, 50 * 1024 * 1024),
    LOG_LEVEL=(str, "INFO"),
)

environ.Env.read_env(os.path.join(BASE_DIR, ".env"))

DEBUG = env("DEBUG")
SECRET_KEY = env("SECRET_KEY")
ALLOWED_HOSTS = env("ALLOWED_HOSTS")

# Ensure Render deployment hostname is allowed and trusted for CSRF
RENDER_EXTERNAL_HOSTNAME = os.environ.get("RENDER_EXTERNAL_HOSTNAME")
if RENDER_EXTERNAL_HOSTNAME:
    if RENDER_EXTERNAL_HOSTNAME not in ALLOWED_HOSTS:
        ALLOWED_HOSTS = list(ALLOWED_HOSTS) + [RENDER_EXTERNAL_HOSTNAME]
    CSRF_TRUSTED_ORIGINS = [f"https://{RENDER_EXTERNAL_HOSTNAME}"]

INSTALLED_APPS = [
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",
    # Third-party
    "widget_tweaks",
    # Local apps (explicit AppConfig to avoid name conflicts)
    "core.apps.CoreConfig",
    "catalog.apps.CatalogConfig",
    "visitors.apps.VisitorsConfig",
    "dashboard.apps.DashboardConfig",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
]

ROOT_URLCONF = "muahib.urls"

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [BASE_DIR / "templates"],
        "APP_DIRS": True,
        "OPTIONS": {
            "context_processors": [
                "django.template.context_processors.debug",
                "django.template.context_processors.request",
                "django.contrib.auth.context_processors.auth",
                "django.contrib.messages.context_processors.messages",
                "core.context_processors.store_context",
            ],
        },
    },
]

WSGI_APPLICATION = "muahib.wsgi.application"

# Database: use DATABASE_URL if provided (e.g., hosted Postgres), fallback to SQLite
DATABASES = {
    "default": env.db(
        "DATABASE_URL",
        default=f"sqlite:///{BASE_DIR / 'db.sqlite3'}",
    )
}

# Persistent connections (no-op for SQLite)
DATABASES["default"]["CONN_MAX_AGE"] = env.int("CONN_MAX_AGE", default=60)

AUTH_PASSWORD_VALIDATORS = [
    {"NAME": "django.contrib.auth.password_validation.UserAttributeSimilarityValidator"},
    {"NAME": "django.contrib.auth.password_validation.MinimumLengthValidator"},
    {"NAME": "django.contrib.auth.password_validation.CommonPasswordValidator"},
    {"NAME": "django.contrib.auth.password_validation.NumericPasswordValidator"},
]

LANGUAGE_CODE = "en-us"
TIME_ZONE = "Africa/Lagos"
USE_I18N = True
USE_TZ = True

STATIC_URL = "/static/"
STATIC_ROOT = BASE_DIR / "staticfiles"
STATICFILES_DIRS = [BASE_DIR / "static"]

MEDIA_URL = "/media/"
MEDIA_ROOT = BASE_DIR / "media"

# Media buckets. Each bucket is a named storage so it can be pointed at
# object storage (django-storages) without touching catalog code.
STORAGES = {
    "default": {
        "BACKEND": "django.core.files.storage.FileSystemStorage",
    },
    "staticfiles": {
        "BACKEND": "django.contrib.staticfiles.storage.StaticFilesStorage",
    },
    "product-images": {
        "BACKEND": "django.core.files.storage.FileSystemStorage",
        "OPTIONS": {
            "location": MEDIA_ROOT / "product-images",
            "base_url": f"{MEDIA_URL}product-images/",
        },
    },
    "videos": {
        "BACKEND": "django.core.files.storage.FileSystemStorage",
        "OPTIONS": {
            "location": MEDIA_ROOT / "videos",
            "base_url": f"{MEDIA_URL}videos/",
        },
    },
}

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

LOGIN_URL = "/admin/login/"

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "simple": {"format": "%(asctime)s %(levelname)s %(name)s: %(message)s"},
    },
    "handlers": {
        "console": {"class": "logging.StreamHandler", "formatter": "simple"},
    },
    "root": {"handlers": ["console"], "level": "WARNING"},
    "loggers": {
        "catalog": {"handlers": ["console"], "level": env("LOG_LEVEL"), "propagate": False},
        "visitors": {"handlers": ["console"], "level": env("LOG_LEVEL"), "propagate": False},
        "dashboard": {"handlers": ["console"], "level": env("LOG_LEVEL"), "propagate": False},
    },
}

# Store settings
STORE_NAME = "Muahib Gadgets"
STORE_DOMAIN = env("SITE_DOMAIN")
CURRENCY_SYMBOL = env("CURRENCY_SYMBOL")
BRAND_TAGLINE = env("BRAND_TAGLINE")
BRAND_LOGO = env("BRAND_LOGO")  # relative to STATIC files, e.g., img/logo.png

# WhatsApp ordering / lead capture
STORE_WHATSAPP_NUMBER = env("STORE_WHATSAPP_NUMBER")
DEFAULT_COUNTRY_CODE = env("DEFAULT_COUNTRY_CODE")
POPUP_COOLDOWN_DAYS = env("POPUP_COOLDOWN_DAYS")
POPUP_DELAY_MS = env("POPUP_DELAY_MS")
WHATSAPP_DUPLICATE_WINDOW_HOURS = env("WHATSAPP_DUPLICATE_WINDOW_HOURS")

MAX_IMAGE_UPLOAD_SIZE = env("MAX_IMAGE_UPLOAD_SIZE")
MAX_VIDEO_UPLOAD_SIZE = env("MAX_VIDEO_UPLOAD_SIZE")
