import copy
import os
import yaml
from typing import Dict, Any, Optional
from .logging import logger

DEFAULT_SYSTEM_PROMPT = (
    "You are a helpful assistant who will answer space/astronomy questions. "
    "Your name is Livia. You may answer any other questions. "
    "You are in an app called Cosmofy."
)

DEFAULT_GREETING = (
    "Greetings from Livia! I can provide you with in-depth knowledge and "
    "insights about space like never before."
)

DEFAULT_CONFIG: Dict[str, Any] = {
    "chat": {
        "endpoint": "https://swift.arryan.xyz/v1/chat/completions",
        "model": "gpt-4o",
        "temperature": 0.65,
        "system_prompt": DEFAULT_SYSTEM_PROMPT,
        "greeting": DEFAULT_GREETING,
        "max_input_chars": 40000,
        "history_budget_chars": 16000 * 4,
        "max_transcript_entries": 200,
        "timeouts": {
            "connect": 10.0,
            "read": 60.0,
            "write": 10.0,
            "pool": 10.0,
        },
    },
    "graphql": {
        "endpoint": "https://livia.arryan.xyz/graphql",
        "timeout": 30.0,
    },
    "credential": {
        "type": "graphql",
        "passphrase_env": "LIVIA_PASSPHRASE",
        "api_key_env": "LIVIA_API_KEY",
    },
}

# env var -> (section, key)
ENV_OVERRIDES = {
    "LIVIA_CHAT_ENDPOINT": ("chat", "endpoint"),
    "LIVIA_MODEL": ("chat", "model"),
    "LIVIA_GRAPHQL_ENDPOINT": ("graphql", "endpoint"),
    "LIVIA_CREDENTIAL_TYPE": ("credential", "type"),
}


def merge_config(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge override into a copy of base."""
    merged = copy.deepcopy(base)
    for key, value in (override or {}).items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = merge_config(merged[key], value)
        else:
            merged[key] = value
    return merged


class ConfigManager:
    def __init__(self, config_dir: str = "config", config_file: str = "livia.yaml", overrides: Optional[Dict[str, Any]] = None):
        self.config_dir = config_dir
        self.config_path = os.path.join(config_dir, config_file)
        self.overrides = overrides or {}
        self.config = self._load_config()

        # Загружаем переменные окружения
        self.debug = os.getenv("DEBUG", "false").lower() == "true"
        self.log_level = os.getenv("LOG_LEVEL", "INFO")

        logger.info("Configuration manager initialized", config={
            "config_path": self.config_path,
            "config_exists": os.path.exists(self.config_path),
            "debug_enabled": self.debug,
            "log_level": self.log_level,
            "credential_type": self.config["credential"]["type"],
        })

    def _load_config(self) -> Dict[str, Any]:
        file_config: Dict[str, Any] = {}
        try:
            with open(self.config_path, 'r') as f:
                file_config = yaml.safe_load(f) or {}
        except FileNotFoundError as e:
            logger.warning(f"Configuration file not found: {e.filename}, using defaults", config={
                "error_type": "file_not_found",
                "file_path": self.config_path
            })
        except yaml.YAMLError as e:
            logger.error(f"Error parsing YAML file: {e}", config={
                "error_type": "yaml_parse_error",
                "file_path": self.config_path
            })

        if not isinstance(file_config, dict):
            logger.warning("Configuration root is not a mapping, ignoring file", config={
                "file_path": self.config_path
            })
            file_config = {}

        config = merge_config(DEFAULT_CONFIG, file_config)
        config = merge_config(config, self.overrides)

        for env_name, (section, key) in ENV_OVERRIDES.items():
            value = os.getenv(env_name)
            if value:
                config[section][key] = value

        return config

    def get_config(self) -> Dict[str, Any]:
        return self.config

    @property
    def chat(self) -> Dict[str, Any]:
        return self.config["chat"]

    @property
    def graphql(self) -> Dict[str, Any]:
        return self.config["graphql"]

    @property
    def credential(self) -> Dict[str, Any]:
        return self.config["credential"]

    @property
    def is_debug_enabled(self) -> bool:
        """Возвращает True если включен режим отладки"""
        return self.debug

    def reload_config(self):
        logger.info("Reloading configuration", config={"config_path": self.config_path})
        self.config = self._load_config()
        logger.info("Configuration reloaded", config={
            "model": self.chat["model"],
            "chat_endpoint": self.chat["endpoint"],
        })
