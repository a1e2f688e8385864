import json
import logging
import os
from typing import Any, Dict, Iterator, List, Optional, Tuple, Type

from pydantic.fields import FieldInfo
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

logger = logging.getLogger(__name__)

# Searched in order when CONFIG_FILE is not set
CONFIG_PATHS = ("config.json", "../config.json", "config/config.json")

# Nested config.json layout -> flat setting names
NESTED_KEYS = {
    ("proxy", "host"): "PROXY_HOST",
    ("proxy", "port"): "PROXY_PORT",
    ("oracle", "host"): "ORACLE_HOST",
    ("oracle", "port"): "ORACLE_PORT",
    ("oracle", "endpoints", "inserts"): "ORACLE_INSERT_ENDPOINT",
    ("oracle", "endpoints", "procedures"): "ORACLE_PROCEDURE_ENDPOINT",
    ("oracle", "token"): "ORACLE_TOKEN",
    ("oracle", "schema"): "ORACLE_SCHEMA",
    ("oracle", "timeout"): "ORACLE_TIMEOUT_SECONDS",
    ("logging", "enabled"): "LOG_ENABLED",
    ("logging", "directory"): "LOG_DIR",
    ("cors", "enabled"): "CORS_ENABLED",
    ("cors", "origins"): "CORS_ORIGINS",
}
NESTED_SECTIONS = {path[0] for path in NESTED_KEYS}


def find_config_file() -> Optional[str]:
    explicit = os.environ.get("CONFIG_FILE")
    if explicit:
        return explicit
    for path in CONFIG_PATHS:
        if os.path.exists(path):
            return path
    return None


def _leaves(data: Dict[str, Any], prefix: Tuple[str, ...] = ()) -> Iterator[Tuple[Tuple[str, ...], Any]]:
    for key, value in data.items():
        path = prefix + (key,)
        if isinstance(value, dict) and path not in NESTED_KEYS:
            yield from _leaves(value, path)
        else:
            yield path, value


def flatten_config(data: Dict[str, Any], field_names) -> Dict[str, Any]:
    """
    Map a config.json onto setting names.

    Accepts both layouts, flat keys winning over nested ones:
        {"ORACLE_HOST": "10.0.0.5"}
        {"oracle": {"host": "10.0.0.5", "endpoints": {"inserts": "/exec"}}}

    Keys that match neither are logged, never silently dropped.
    """
    flat: Dict[str, Any] = {}
    nested: Dict[str, Any] = {}

    for key, value in data.items():
        if key in field_names:
            flat[key] = value
        elif key in NESTED_SECTIONS and isinstance(value, dict):
            for path, leaf in _leaves(value, (key,)):
                if path in NESTED_KEYS:
                    nested[NESTED_KEYS[path]] = leaf
                else:
                    logger.warning("Clave de configuración desconocida: %s", ".".join(path))
        else:
            logger.warning("Clave de configuración desconocida: %s", key)

    return {**nested, **flat}


class JsonConfigFileSource(PydanticBaseSettingsSource):
    """Settings from config.json, flat or in the nested proxy/oracle layout."""

    def __init__(self, settings_cls: Type[BaseSettings], json_file: Optional[str] = None):
        super().__init__(settings_cls)
        self.json_file = (
            json_file or settings_cls.model_config.get("json_file") or find_config_file()
        )
        self.data = self._load()

    def _load(self) -> Dict[str, Any]:
        if not self.json_file or not os.path.exists(self.json_file):
            return {}

        try:
            with open(self.json_file, encoding="utf-8") as f:
                raw = json.load(f)
        except (OSError, ValueError) as error:
            logger.warning("Error leyendo %s: %s", self.json_file, error)
            return {}

        if not isinstance(raw, dict):
            logger.warning("Ignorando %s: se esperaba un objeto JSON", self.json_file)
            return {}

        logger.info("Configuración cargada desde: %s", self.json_file)
        return flatten_config(raw, self.settings_cls.model_fields)

    def get_field_value(self, field: FieldInfo, field_name: str) -> Tuple[Any, str, bool]:
        return self.data.get(field_name), field_name, False

    def __call__(self) -> Dict[str, Any]:
        return dict(self.data)


class Settings(BaseSettings):
    # Proxy
    PROXY_HOST: str = "localhost"
    PROXY_PORT: int = 8005

    # Downstream Oracle execution API
    ORACLE_HOST: str = "10.6.46.114"
    ORACLE_PORT: int = 8087
    ORACLE_INSERT_ENDPOINT: str = "/exec"
    ORACLE_PROCEDURE_ENDPOINT: str = "/procedure"
    ORACLE_TOKEN: str = "demo"
    # Schema every generated INSERT is qualified with
    ORACLE_SCHEMA: str = "GANANCIAS"
    ORACLE_TIMEOUT_SECONDS: float = 30.0

    LOG_ENABLED: bool = True
    LOG_DIR: str = "logs"

    CORS_ENABLED: bool = True
    CORS_ORIGINS: List[str] = ["*"]

    # This tells Pydantic to read from the .env file
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: Type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> Tuple[PydanticBaseSettingsSource, ...]:
        # init kwargs > env vars > .env > config.json
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            JsonConfigFileSource(settings_cls),
        )

    @property
    def oracle_base_url(self) -> str:
        return f"http://{self.ORACLE_HOST}:{self.ORACLE_PORT}"

    @property
    def insert_url(self) -> str:
        return f"{self.oracle_base_url}{self.ORACLE_INSERT_ENDPOINT}"

    @property
    def procedure_url(self) -> str:
        return f"{self.oracle_base_url}{self.ORACLE_PROCEDURE_ENDPOINT}"


# Create a single instance of the settings to use everywhere
settings = Settings()
