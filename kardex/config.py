# kardex/config.py

import os
import logging
import logging.config
from decimal import Decimal

# --- Database Configuration ---
BASE_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))  # kardex/ -> project root
DATA_DIR = os.environ.get("KARDEX_DATA_DIR", os.path.join(BASE_DIR, "data"))
DB_NAME = "kardex_data.db"
DATABASE_PATH = os.environ.get("KARDEX_DB_PATH", os.path.join(DATA_DIR, DB_NAME))

# --- Logging Configuration ---
LOGS_DIR = os.environ.get("KARDEX_LOGS_DIR", os.path.join(BASE_DIR, "logs"))
LOG_FILE_NAME = "app.log"
LOG_FILE_PATH = os.path.join(LOGS_DIR, LOG_FILE_NAME)
LOG_LEVEL = getattr(logging, os.environ.get("KARDEX_LOG_LEVEL", "DEBUG").upper(), logging.DEBUG)
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(module)s.%(funcName)s:%(lineno)d - %(message)s'

LOGGING_CONFIG = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'standard': {
            'format': LOG_FORMAT,
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'standard',
            'level': LOG_LEVEL,
        },
        'file': {
            'class': 'logging.handlers.RotatingFileHandler',
            'formatter': 'standard',
            'filename': LOG_FILE_PATH,
            'maxBytes': 1024*1024*5,  # 5 MB
            'backupCount': 5,
            'level': logging.INFO,
            'encoding': 'utf-8',
        },
    },
    'root': {
        'handlers': ['console', 'file'],
        'level': LOG_LEVEL,
    },
}

# --- Application Settings ---
DEFAULT_CURRENCY = "IRR"
CURRENCY_LABEL = "ریال"
COMPANY_NAME = "نام شرکت شما"  # used until a company record is saved

# Jalaali dates are shown in this zone; instants are stored in UTC.
DISPLAY_TIMEZONE = os.environ.get("KARDEX_DISPLAY_TIMEZONE", "Asia/Tehran")

# Cardex previews the effect of draft documents unless told otherwise.
INCLUDE_DRAFTS_IN_CARDEX = True

# Regenerate a document's inventory movements when it is edited or deleted.
RESYNC_MOVEMENTS_ON_EDIT = True

# Negative balances smaller than this are rounding residue and read as zero.
ROUNDING_TOLERANCE = Decimal("0.000001")

DELETED_PRODUCT_LABEL = "کالای حذف شده"
DELETED_PRODUCT_CODE = "DELETED"
UNKNOWN_PARTY_LABEL = "نامشخص"


def ensure_directories() -> None:
    for path in (DATA_DIR, LOGS_DIR):
        if not os.path.exists(path):
            os.makedirs(path)


def setup_logging(config: dict = None) -> None:
    """Creates the log directory and applies the logging dict config."""
    if not os.path.exists(LOGS_DIR):
        os.makedirs(LOGS_DIR)
    logging.config.dictConfig(config or LOGGING_CONFIG)
