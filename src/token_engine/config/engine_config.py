"""Token engine configuration from environment variables or a YAML file."""
import os
from functools import lru_cache
from typing import Any, Dict, List, Optional

import yaml
from pydantic import BaseModel, Field, field_validator

ENV_PREFIX = "TOKEN_"
DEFAULT_CONFIG_PATH = "token_engine.yaml"

_FALSE_STRINGS = ("0", "false", "no", "off", "")


class EngineConfig(BaseModel):
    """
    Token engine configuration.
    """
    allowed_algorithms: List[str] = Field(
        default_factory=lambda: ["HS256"],
        description="Algorithms accepted on load and emitted on dump",
    )
    jti_length: int = Field(
        default=16,
        ge=0,
        description="Random bytes in a generated 'jti' nonce (0 disables it)",
    )
    leeway: int = Field(
        default=0,
        ge=0,
        description="Leeway in seconds for clock skew on exp/nbf/iat",
    )
    require_typ: bool = Field(
        default=True,
        description="Whether header 'typ' must be 'JWT'",
    )
    ed25519: bool = Field(
        default=False,
        description="Use the signature engine with Ed25519 support",
    )

    @field_validator("allowed_algorithms", mode="before")
    @classmethod
    def split_algorithms(cls, v):
        # accept "HS256,HS512" from env/yaml as well as a list
        if isinstance(v, str):
            return [p.strip() for p in v.split(",") if p.strip()]
        return v

    @field_validator("require_typ", "ed25519", mode="before")
    @classmethod
    def parse_flag(cls, v):
        if isinstance(v, str):
            return v.strip().lower() not in _FALSE_STRINGS
        return v

    @classmethod
    def from_env(cls) -> "EngineConfig":
        """
        Load configuration from environment variables.

        Environment variables:
            TOKEN_ALLOWED_ALGORITHMS: Comma separated algorithm identifiers
            TOKEN_JTI_LENGTH: Random bytes in generated 'jti'
            TOKEN_LEEWAY: Clock skew leeway in seconds
            TOKEN_REQUIRE_TYP: Require header 'typ' == 'JWT'
            TOKEN_ED25519: Use the Ed25519 capable engine

        Unset variables keep their defaults.

        Returns:
            EngineConfig instance
        """
        values: Dict[str, Any] = {}
        for name in cls.model_fields:
            raw = os.getenv(ENV_PREFIX + name.upper())
            if raw is not None:
                values[name] = raw
        return cls(**values)

    @classmethod
    def from_yaml(cls, config_path: Optional[str] = None) -> "EngineConfig":
        """
        Load configuration from a YAML file.

        Args:
            config_path: Path to the YAML file. If None, uses TOKEN_CONFIG_PATH
                        env var or defaults to ./token_engine.yaml

        Keys are the environment names without the TOKEN_ prefix, in either
        case (ALLOWED_ALGORITHMS or allowed_algorithms).

        Returns:
            EngineConfig instance (defaults if the file does not exist)
        """
        if config_path is None:
            config_path = os.getenv("TOKEN_CONFIG_PATH", DEFAULT_CONFIG_PATH)

        if not os.path.exists(config_path):
            return cls()

        with open(config_path, "r") as f:
            config_data = yaml.safe_load(f) or {}

        if not isinstance(config_data, dict):
            raise ValueError(f"{config_path} must contain a mapping at the top level")

        values = {
            str(key).lower(): value
            for key, value in config_data.items()
            if str(key).lower() in cls.model_fields
        }
        return cls(**values)


@lru_cache()
def get_engine_config() -> EngineConfig:
    """
    Get cached engine configuration.

    A YAML file (TOKEN_CONFIG_PATH) takes precedence; otherwise the
    environment is used.

    Returns:
        EngineConfig instance
    """
    config_path = os.getenv("TOKEN_CONFIG_PATH")
    if config_path:
        return EngineConfig.from_yaml(config_path)
    return EngineConfig.from_env()
