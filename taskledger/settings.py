"""Settings resolution with profile precedence chain."""

import os
from collections.abc import Mapping
from functools import lru_cache
from pathlib import Path

import tomlkit
import typer
from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

CONFIG_PATH = Path.home() / ".config" / "taskledger" / "config.toml"


class LedgerSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="TASKLEDGER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    default_profile: str | None = None
    provider: str = "github"  # "github" | "gitlab", resolved from active profile

    # GitHub
    github_token: SecretStr | None = None
    github_auth: str = "token"  # "token" | "gh-cli"

    # GitLab
    gitlab_token: SecretStr | None = None
    gitlab_url: str = "https://gitlab.com/api/v4"

    # Views
    manager_id: int = 1
    page_size: int = 10


@lru_cache(maxsize=1)
def _load_toml() -> tomlkit.TOMLDocument:
    """Load ~/.config/taskledger/config.toml, returning empty document if missing."""
    if not CONFIG_PATH.exists():
        return tomlkit.document()
    return tomlkit.load(CONFIG_PATH.open())


def _list_profiles(config: Mapping) -> list[str]:
    # tomlkit Table implements MutableMapping but not dict, so check Mapping
    return [k for k, v in config.items() if isinstance(v, Mapping)]


def get_settings(profile: str | None = None) -> LedgerSettings:
    """Resolve the active profile and return a fully populated LedgerSettings.

    Precedence (highest to lowest):
    1. profile argument (--profile CLI flag)
    2. TASKLEDGER_DEFAULT_PROFILE env var
    3. default_profile key in ~/.config/taskledger/config.toml
    4. First profile defined in ~/.config/taskledger/config.toml
    """
    toml_config = _load_toml()

    active = (
        profile
        or os.environ.get("TASKLEDGER_DEFAULT_PROFILE")
        or toml_config.get("default_profile")
        or ((_profiles := _list_profiles(toml_config)) and _profiles[0] or None)
    )

    profile_defaults: dict = {}
    if active:
        if active in toml_config and isinstance(toml_config[active], Mapping):
            profile_defaults = dict(toml_config[active])
        else:
            profiles = _list_profiles(toml_config)
            typer.echo(f"Profile '{active}' not found in {CONFIG_PATH}. Available: {profiles or '(none)'}")
            raise typer.Exit(1)

    settings = LedgerSettings(**profile_defaults)

    github_needs_token = settings.provider == "github" and settings.github_auth == "token"
    if github_needs_token and not settings.github_token:
        typer.echo(
            "Missing GitHub credentials. Set TASKLEDGER_GITHUB_TOKEN or "
            f"github_token in the [{active or 'profile'}] section of {CONFIG_PATH}, "
            'or set github_auth = "gh-cli" to use the gh CLI.'
        )
        raise typer.Exit(1)
    if settings.provider == "gitlab" and not settings.gitlab_token:
        typer.echo(
            "Missing GitLab credentials. Set TASKLEDGER_GITLAB_TOKEN or "
            f"gitlab_token in the [{active or 'profile'}] section of {CONFIG_PATH}"
        )
        raise typer.Exit(1)

    return settings


def set_default_profile(profile: str) -> Path:
    """Record profile as default_profile in the config file and return its path.

    A missing config file is created. An existing one must already define the profile.
    """
    if CONFIG_PATH.exists():
        doc = tomlkit.load(CONFIG_PATH.open())
        profiles = _list_profiles(doc)
        if profile not in profiles:
            typer.echo(f"Profile '{profile}' not found in {CONFIG_PATH}. Available: {profiles or '(none)'}")
            raise typer.Exit(1)
    else:
        CONFIG_PATH.parent.mkdir(parents=True, exist_ok=True)
        doc = tomlkit.document()

    doc["default_profile"] = profile
    CONFIG_PATH.write_text(tomlkit.dumps(doc))
    _load_toml.cache_clear()
    return CONFIG_PATH
