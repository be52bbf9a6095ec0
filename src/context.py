import os
import logging
from typing import Optional

from dotenv import load_dotenv, find_dotenv
from textual.logging import TextualHandler

from config_store import BASE_DIR

# load .env first so config_store and security see its values
load_dotenv(find_dotenv(usecwd=True))

LOG_FORMAT = "[%(asctime)s] %(levelname)s: %(message)s"
DEFAULT_LOG_PATH = os.path.join(BASE_DIR, "rcon_dashboard.log")


def log_path(override: Optional[str] = None) -> str:
    return override or os.getenv("RCONDASH_LOG") or DEFAULT_LOG_PATH


def configure_logging(path: Optional[str] = None, level: int = logging.INFO) -> str:
    """
    File log plus TextualHandler: the latter goes to stderr while no app is
    running and to the textual devtools console once the dashboard is up.
    """
    path = log_path(path)
    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        handlers=[
            logging.FileHandler(path, encoding="utf-8"),
            TextualHandler(),
        ],
        force=True,
    )
    return path
