import os
from pathlib import Path

# Paths
BASE_DIR = os.path.dirname(os.path.abspath(__file__))
DATA_DIR = Path(os.environ.get("SCRIBEFIX_HOME") or Path.home() / ".scribefix")
LOGS_DIR = DATA_DIR / "logs"
SETTINGS_FILE = DATA_DIR / "settings.json"

# Text
SENTENCE_TERMINALS = ".!?"
SPACED_PUNCTUATION = ",.:;!?"

# Logging
LOG_FILE_NAME = "scribefix.log"
LOG_DB_NAME = "scribefix_logging.db"
