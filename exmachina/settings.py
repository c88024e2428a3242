from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


def choose_env_file() -> str:
    return ".env.local" if Path(".env.local").exists() else ".env"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=choose_env_file(),
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",  # tolerate unrelated env vars
    )

    # Paths
    SITE_ROOT: str = "."
    OUTPUT_DIR: str = "public"
    PATH_PREFIX: str = ""

    # Build
    INCLUDE_DRAFTS: bool = False

    # Preview server
    HOST: str = "127.0.0.1"
    PORT: int = 8000

    # Logging
    LOG_LEVEL: str = "INFO"

    @property
    def site_root(self) -> Path:
        return Path(self.SITE_ROOT)

    @property
    def output_path(self) -> Path:
        output = Path(self.OUTPUT_DIR)
        return output if output.is_absolute() else self.site_root / output

    @property
    def static_path(self) -> Path:
        return self.output_path / "static"

    @property
    def path_prefix(self) -> str:
        prefix = self.PATH_PREFIX.strip().rstrip("/")
        if prefix and not prefix.startswith("/"):
            prefix = f"/{prefix}"
        return prefix

    def resolve(self, path: str) -> Path:
        """Resolve a site-relative path (as written in the site config)."""
        candidate = Path(path)
        return candidate if candidate.is_absolute() else self.site_root / candidate


# Global settings instance (evaluated at import, but reads env on construction)
settings = Settings()
