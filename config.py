import os
from logging.config import dictConfig
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()  # Load environment variables from .env file if present

NAME = 'cableeye'
VERSION = '0.1.0'

LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO').strip().upper() or 'INFO'

# Wipe the SQLite database on startup (the old demo behavior); off by default.
DATABASE_RESET = os.getenv('DATABASE_RESET', '0').strip().lower() in ('1', 'true', 'yes')

# When set, clients talk to the HTTP report service; otherwise they fall back
# to the local JSON snapshot under LOCAL_STORAGE_DIR.
REPORT_STORE_URL = os.getenv('REPORT_STORE_URL', '').strip() or None
REPORT_STORE_TIMEOUT = float(os.getenv('REPORT_STORE_TIMEOUT', '10'))
LOCAL_STORAGE_DIR = Path(os.getenv('LOCAL_STORAGE_DIR', 'data/local_storage')).expanduser()

STORAGE_KEY = 'cableReports'
DESCRIPTION_MAX_LENGTH = 500
RECENT_REPORTS_LIMIT = 5
PREVIEW_MAX_SIZE = (160, 160)

# Logging configuration
dictConfig(
    {
        'version': 1,
        'disable_existing_loggers': False,
        'formatters': {
            'default': {
                '()': 'uvicorn.logging.DefaultFormatter',
                'fmt': '%(levelprefix)s | %(asctime)s | %(name)s: %(message)s',
                'datefmt': '%Y-%m-%d %H:%M:%S',
            },
        },
        'handlers': {
            'default': {
                'formatter': 'default',
                'class': 'logging.StreamHandler',
                'stream': 'ext://sys.stderr',
            },
        },
        'loggers': {
            'root': {'handlers': ['default'], 'level': LOG_LEVEL},
            **{
                # reduce logging verbosity of some modules
                module: {'handlers': [], 'level': 'INFO'}
                for module in (
                    'aiosqlite',
                    'httpx',
                    'httpcore',
                    'PIL',
                )
            },
        },
    }
)
