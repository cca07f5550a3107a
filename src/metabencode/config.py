"""
Configuration for the metabencode command line tool.
Loads settings from a .env file, with the environment taking precedence and
fallbacks for everything.
"""
import os

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


def _flag(name: str, default: str = "False") -> bool:
	return os.getenv(name, default).lower() in ("true", "1", "t", "yes")


# ===== Decoder =====
# kept as text, the CLI validates it like --max-depth
MAX_DEPTH = os.getenv("METABENCODE_MAX_DEPTH", "200")
STRICT_KEY_ORDER = _flag("METABENCODE_STRICT_KEY_ORDER")

# ===== Verification =====
SHOW_PROGRESS = _flag("METABENCODE_PROGRESS", "True")

# ===== Logging =====
DEBUG = _flag("DEBUG")
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG" if DEBUG else "WARNING").upper()
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
