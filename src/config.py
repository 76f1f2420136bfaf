import copy
import json
from typing import Dict, Any

from src.core import database as db
from src.core.schema import initialize_database
from src.logger import get_logger

logger = get_logger(__name__)

# Draft provider configuration constants
BUILTIN_DRAFT_PROVIDERS = ["mock", "openai"]

BUILTIN_DRAFT_PROVIDER_DISPLAY_NAMES = {
    "mock": "Mock (offline)",
    "openai": "OpenAI",
}

NOTIFICATION_PROVIDERS = ["log", "slack"]

PROVIDER_DEFAULTS = {
    "max_retries": 3,
    "timeout": 30
}

PROVIDER_NAME_PATTERN = r"^[a-zA-Z0-9_-]+$"

DEFAULT_SYSTEM_MESSAGE = "You are a professional translator. Return only valid JSON."

DRAFT_PROMPT = """You are a professional translator working on product UI strings for a vacation rental platform.

Translate the English text below into each of these languages: {language_list}.
Return ONLY a JSON object whose keys are the language codes ({language_codes}) and whose values are the translations.

CRITICAL REQUIREMENTS:
- Preserve placeholders such as {{name}}, %s, %d exactly as they appear
- Keep the tone and length close to the original
- Do not include explanations or markdown code blocks

English text:
{source_json}"""

# Default configuration templates
DEFAULT_CONFIG = {
    "workflow": {
        "slack_channel": "#translations",
        "default_project": "Holidu Web",
        "auto_translate": True,
        "notifications": True,
        "deep_link_template": "https://poeditor.com/projects/view?id=123456&key={key}",
        "seed_demo_data": True,
    },
    "notifications": {
        "provider": "log",
        "api_url": "https://slack.com/api/chat.postMessage",
        "api_token": "YOUR_API_TOKEN_HERE",
        "permalink_template": "https://holidu.slack.com/archives/{channel}/p{ts}",
        "max_retries": 3,
        "timeout": 15,
    },
    "drafts": {
        "provider": "mock",
        "simulated_latency": 1.0,
        "job_timeout": 60,
        "max_retries": 3,
        "mock": {},
        "openai": {
            "api_key": "YOUR_API_KEY_HERE",
            "models": ["gpt-4o-mini", "gpt-4o"],  # First is default
            "max_retries": 3,
            "timeout": 30,
            "api_url": "https://api.openai.com/v1/chat/completions"
        },
    },
    "log_mode": "info"
}


def initialize_app():
    """
    Initialize the application.
    Creates the settings database and stores the default configuration on first run.
    """
    logger.info("Initializing application...")

    initialize_database()
    logger.info("Database initialized")

    try:
        existing_config = db.get_app_config('config')
        if not existing_config:
            logger.info("No config in database, initializing default config")
            save_config(DEFAULT_CONFIG)
        else:
            logger.debug("Config already exists in database")
    except Exception as e:
        logger.error(f"Failed to check/initialize config in database: {e}")
        logger.warning("Application will use in-memory default configuration")

    logger.info("Application initialization complete")


def _merge_defaults(config: Dict[str, Any], defaults: Dict[str, Any]) -> Dict[str, Any]:
    """Fill keys missing from a stored config with their defaults (recursively)."""
    merged = copy.deepcopy(defaults)
    for key, value in config.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge_defaults(value, merged[key])
        else:
            merged[key] = value
    return merged


def load_config() -> Dict[str, Any]:
    """Load the configuration from database, merged over the defaults."""
    try:
        config_json = db.get_app_config('config')
    except Exception as e:
        logger.error(f"Failed to load config from database: {e}")
        logger.warning("Using default configuration")
        return copy.deepcopy(DEFAULT_CONFIG)

    if not config_json:
        logger.debug("No config in database, using defaults")
        return copy.deepcopy(DEFAULT_CONFIG)

    try:
        config = json.loads(config_json)
    except json.JSONDecodeError as e:
        logger.error(f"Failed to parse config from database: {e}")
        logger.warning("Using default configuration")
        return copy.deepcopy(DEFAULT_CONFIG)

    if not isinstance(config, dict):
        logger.warning("Stored config is not an object, using default configuration")
        return copy.deepcopy(DEFAULT_CONFIG)

    return _merge_defaults(config, DEFAULT_CONFIG)


def save_config(config: Dict[str, Any]):
    """Save the configuration to database."""
    try:
        config_json = json.dumps(config, ensure_ascii=False)
        db.set_app_config('config', config_json)
        logger.info("Configuration saved to database")
    except Exception as e:
        logger.error(f"Failed to save config to database: {e}")
        raise


def get_log_mode() -> str:
    """Read the log mode without creating the database as a side effect."""
    if not db.DB_FILE.exists():
        return DEFAULT_CONFIG["log_mode"]
    config_json = db.get_app_config('config')
    if not config_json:
        return DEFAULT_CONFIG["log_mode"]
    return json.loads(config_json).get("log_mode", DEFAULT_CONFIG["log_mode"])


def factory_reset():
    """
    Perform a factory reset.
    WARNING: This will delete the stored settings and reset to defaults.
    """
    logger.warning("Performing factory reset...")

    if db.DB_FILE.exists():
        db.DB_FILE.unlink()
        logger.info("Database deleted")

    initialize_app()
    logger.info("Factory reset complete")
