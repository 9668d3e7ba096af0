"""Application settings — Pydantic-based configuration with YAML and env var support.

Configuration is loaded from (in order of precedence):
  1. YAML config file (if specified)
  2. Environment variables (PYPISIFT_ prefix)
  3. Default values
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic_settings import BaseSettings


class ServerSettings(BaseModel):
    """HTTP server configuration."""

    host: str = Field(default="0.0.0.0", description="Server bind address")
    port: int = Field(default=8080, description="Server port")
    workers: int = Field(default=4, description="Number of worker processes")


class IndexSettings(BaseModel):
    """Search index (OpenSearch) connection configuration."""

    hosts: list[str] = Field(default_factory=lambda: ["https://localhost:9200"], description="OpenSearch node URLs")
    index_pattern: str = Field(default="*", description="Index pattern; '{repository}' expands to the repository name")
    username: str | None = Field(default=None, description="Authentication username")
    password: str | None = Field(default=None, description="Authentication password")
    verify_certs: bool = Field(default=True, description="Verify TLS certificates")
    page_size: int = Field(default=500, ge=1, le=10000, description="Hits fetched per round trip")

    @field_validator("hosts", mode="before")
    @classmethod
    def _parse_hosts(cls, v: Any) -> list[str]:
        """Parse hosts from JSON string (env var) or list."""
        if isinstance(v, str):
            import json

            try:
                parsed = json.loads(v)
                if isinstance(parsed, list):
                    return [str(h) for h in parsed]
            except (json.JSONDecodeError, TypeError):
                pass
            # Single host as plain string
            return [v] if v else []
        return list(v)


class UpstreamSettings(BaseModel):
    """Remote XML-RPC server access configuration."""

    timeout: float = Field(default=30.0, gt=0, description="Upstream request timeout in seconds")
    max_concurrent: int = Field(default=8, ge=1, description="Max group members searched at once")


class RepositoryConfig(BaseModel):
    """Configuration for a single repository.

    - ``hosted`` repositories are searched in the index.
    - ``proxy`` repositories forward searches to ``remote_url``.
    - ``group`` repositories merge the results of their ``members``.
    """

    type: Literal["hosted", "proxy", "group"] = Field(default="hosted", description="Repository type")
    remote_url: str | None = Field(default=None, description="Remote XML-RPC endpoint (proxy only)")
    members: list[str] = Field(default_factory=list, description="Member repository names (group only)")

    @model_validator(mode="after")
    def _check_type_fields(self) -> RepositoryConfig:
        if self.type == "proxy" and not self.remote_url:
            raise ValueError("proxy repositories require a remote_url")
        if self.type == "group" and not self.members:
            raise ValueError("group repositories require at least one member")
        return self


class ObservabilitySettings(BaseModel):
    """Observability configuration."""

    log_level: str = Field(default="info", description="Log level: debug, info, warning, error")
    log_format: str = Field(default="json", description="Log format: json, console")


class Settings(BaseSettings):
    """Root application settings.

    Configuration is loaded from environment variables with the PYPISIFT_ prefix.
    Nested settings use double underscores: PYPISIFT_SERVER__PORT=9090

    Example:
        PYPISIFT_SERVER__PORT=9090
        PYPISIFT_INDEX__HOSTS='["https://search:9200"]'
        PYPISIFT_UPSTREAM__TIMEOUT=10
    """

    model_config = {
        "env_prefix": "PYPISIFT_",
        "env_nested_delimiter": "__",
        "case_sensitive": False,
        "env_file": ".env",
        "env_file_encoding": "utf-8",
    }

    # Application metadata
    app_name: str = Field(default="PyPISift", description="Application name")
    debug: bool = Field(default=False, description="Debug mode")

    # Component settings
    server: ServerSettings = Field(default_factory=ServerSettings)
    index: IndexSettings = Field(default_factory=IndexSettings)
    upstream: UpstreamSettings = Field(default_factory=UpstreamSettings)
    repositories: dict[str, RepositoryConfig] = Field(default_factory=dict, description="Repositories by name")
    observability: ObservabilitySettings = Field(default_factory=ObservabilitySettings)

    @model_validator(mode="after")
    def _check_group_members(self) -> Settings:
        for name, repo in self.repositories.items():
            unknown = [member for member in repo.members if member not in self.repositories]
            if unknown:
                raise ValueError(f"Group '{name}' references unknown repositories: {unknown}")
        return self

    @classmethod
    def from_yaml(cls, path: str | Path) -> Settings:
        """Load settings from a YAML configuration file.

        Keys set in the YAML file take precedence over environment variables;
        anything the file leaves out still comes from the environment.

        Args:
            path: Path to the YAML config file.

        Returns:
            Populated Settings instance.
        """
        import yaml  # type: ignore[import-untyped]

        config_path = Path(path)
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")

        with open(config_path) as f:
            data = yaml.safe_load(f) or {}

        return cls(**data)
