from .engine_config import EngineConfig, get_engine_config

__all__ = ["EngineConfig", "get_engine_config"]
