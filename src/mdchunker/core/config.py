from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional, List, Dict, Any
from pathlib import Path


class Settings(BaseSettings):
    # Chunking
    CHUNK_TOKEN_BUDGET: int = Field(default=350, gt=0)
    CHUNK_OVERLAP_TOKENS: int = 50  # Accepted for compatibility; no effect on boundaries
    TOKEN_ENCODING: str = "cl100k_base"  # tiktoken encoding used for budgets
    STRICT_OFFSETS: bool = False  # Raise instead of approximating unlocatable spans

    # Indexing fan-out
    INDEX_CONCURRENCY: int = Field(default=30, gt=0)
    INDEX_EXTENSIONS: List[str] = [".md", ".mdx"]

    # Observability
    LOG_FORMAT: str = "auto"  # json|plain|auto

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    @classmethod
    def load_config(cls, config_file: Optional[str] = None) -> "Settings":
        """Load settings with config file -> env -> CLI precedence."""
        config_data: Dict[str, Any] = {}

        config_path: Optional[Path]
        if config_file:
            config_path = Path(config_file)
        else:
            # Auto-discover .mdchunker.{yaml,yml,toml}
            for ext in ["yaml", "yml", "toml"]:
                config_path = Path(f".mdchunker.{ext}")
                if config_path.exists():
                    break
            else:
                config_path = None

        if config_path and config_path.exists():
            if config_path.suffix in [".yaml", ".yml"]:
                import yaml  # type: ignore[import-untyped]

                with open(config_path) as f:
                    config_data = yaml.safe_load(f) or {}
            elif config_path.suffix == ".toml":
                import tomllib

                with open(config_path, "rb") as f:
                    config_data = tomllib.load(f)

        # Config file values act as defaults; environment variables override them
        env_settings = cls()
        overridden = env_settings.model_fields_set
        merged = {k: v for k, v in config_data.items() if k not in overridden}
        return cls(**merged)


# Default settings - replaced by load_config() during CLI startup
SETTINGS = Settings()
