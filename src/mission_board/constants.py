DATA_DIR_ENV = "MISSION_BOARD_HOME"
DEFAULT_DATA_DIR_NAME = ".mission_board"
CONFIG_FILE = "config.yaml"
STORAGE_FILE = "storage.json"
LOCK_SUFFIX = ".lock"
CORRUPT_SUFFIX = ".corrupt"

TASKS_KEY = "tasks"
THEME_KEY = "theme"

THEMES = ("dark", "light")
DEFAULT_THEME = "dark"
DEFAULT_PRIORITY = "medium"
DEFAULT_LOG_LEVEL = "INFO"

LOCK_TIMEOUT = 30  # seconds
