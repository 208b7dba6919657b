"""Configuration management with XDG paths, atomic writes, and precedence resolution.

This module handles all persistent configuration for vksdk:

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.vksdk/`` on macOS and Windows. See :func:`get_config_dir`,
  :func:`get_data_dir`, :func:`get_profiles_dir`.
* **Global config** -- A single :class:`~vksdk.models.GlobalConfig`
  JSON file storing defaults (active profile, output format).
* **Profiles** -- One JSON file per VK application, each deserialised into
  a :class:`~vksdk.models.Profile`.
* **Precedence resolution** -- :func:`resolve_config` picks the active
  profile from the CLI flag, the environment, and the global config.
* **Credential resolution** -- :func:`resolve_credential` reads secrets
  from env vars, files, interactive prompts, or the token store.

All file writes use an atomic temp-file-then-rename strategy
(:func:`_atomic_write`).
"""

from __future__ import annotations

import getpass
import json
import os
import platform
import sys
import tempfile
from pathlib import Path
from typing import Optional, TypeVar, Union

from vksdk.exceptions import ConfigError
from vksdk.models import GlobalConfig, Profile

_APP_NAME = "vksdk"
_CONFIG_FILENAME = "config.json"

ENV_PROFILE = "VKSDK_PROFILE"
ENV_API_VERSION = "VKSDK_API_VERSION"


# --- XDG path resolution ---

# kind -> (XDG variable, default under $HOME, subdirectory of ~/.vksdk)
_BASE_DIRS = {
    "config": ("XDG_CONFIG_HOME", ".config", ""),
    "data": ("XDG_DATA_HOME", ".local/share", "data"),
}


def _is_xdg_platform() -> bool:
    """Return True if the platform supports XDG Base Directory layout (Linux/BSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def _ensure_dir(kind: str, *parts: str) -> Path:
    env_var, home_default, fallback = _BASE_DIRS[kind]
    if _is_xdg_platform():
        base = Path(os.environ.get(env_var) or Path.home() / home_default) / _APP_NAME
    else:
        base = Path.home() / f".{_APP_NAME}" / fallback
    path = base.joinpath(*parts)
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_config_dir() -> Path:
    """``$XDG_CONFIG_HOME/vksdk/`` on Linux/BSD, ``~/.vksdk/`` elsewhere."""
    return _ensure_dir("config")


def get_data_dir() -> Path:
    """``$XDG_DATA_HOME/vksdk/`` on Linux/BSD, ``~/.vksdk/data/`` elsewhere."""
    return _ensure_dir("data")


def get_profiles_dir() -> Path:
    return _ensure_dir("config", "profiles")


def get_credentials_dir() -> Path:
    return _ensure_dir("data", "credentials")


# --- Atomic file writes ---


def _atomic_write(path: Path, data: str, mode: Optional[int] = None) -> None:
    """Write data to file atomically using temp file + rename.

    The temporary file is created in the same directory as *path* so that
    ``os.replace`` is an atomic rename on POSIX systems. When *mode* is
    given it is applied to the temp file before any content is written.
    On any failure the temp file is removed.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    fd = None
    tmp_path: Optional[str] = None
    try:
        fd = tempfile.NamedTemporaryFile(
            mode="w",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
            encoding="utf-8",
        )
        tmp_path = fd.name
        if mode is not None:
            os.chmod(tmp_path, mode)
        fd.write(data)
        fd.flush()
        os.fsync(fd.fileno())
        fd.close()
        fd = None  # prevent double-close in finally
        os.replace(tmp_path, path)
    except BaseException:
        if fd is not None:
            fd.close()
        if tmp_path is not None:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
        raise


# --- Global config and profiles ---

_Model = TypeVar("_Model", GlobalConfig, Profile)


def _read_model(path: Path, model: type[_Model], label: str) -> _Model:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        return model.model_validate(data)
    except (json.JSONDecodeError, ValueError) as exc:
        raise ConfigError(f"Invalid {label} at {path}: {exc}") from exc


def _write_model(path: Path, value: Union[GlobalConfig, Profile]) -> None:
    _atomic_write(path, json.dumps(value.model_dump(mode="json"), indent=2) + "\n")


def _global_config_path() -> Path:
    return get_config_dir() / _CONFIG_FILENAME


def _profile_path(name: str) -> Path:
    return get_profiles_dir() / f"{name}.json"


def load_global_config() -> GlobalConfig:
    """Load the global configuration, or defaults when the file is absent.

    Raises:
        ConfigError: If the file exists but is not a valid config.
    """
    path = _global_config_path()
    if not path.is_file():
        return GlobalConfig()
    return _read_model(path, GlobalConfig, "global config")


def save_global_config(config: GlobalConfig) -> None:
    _write_model(_global_config_path(), config)


def list_profiles() -> list[str]:
    return sorted(p.stem for p in get_profiles_dir().glob("*.json") if p.is_file())


def profile_exists(name: str) -> bool:
    return _profile_path(name).is_file()


def load_profile(name: str) -> Profile:
    """Load a profile from disk.

    Raises:
        ConfigError: If the profile is missing or invalid.
    """
    path = _profile_path(name)
    if not path.is_file():
        raise ConfigError(f"Profile '{name}' not found at {path}")
    return _read_model(path, Profile, f"profile '{name}'")


def save_profile(profile: Profile) -> None:
    _write_model(_profile_path(profile.name), profile)


def delete_profile(name: str) -> None:
    """Delete a profile's JSON file; ConfigError when it does not exist."""
    path = _profile_path(name)
    if not path.is_file():
        raise ConfigError(f"Profile '{name}' not found at {path}")
    path.unlink()


# --- Precedence resolution ---


def resolve_config(
    cli_profile: Optional[str] = None,
) -> tuple[GlobalConfig, Optional[Profile]]:
    """Resolve the global config and the active profile.

    Profile precedence (high to low):
        1. ``cli_profile`` (the ``--profile`` flag)
        2. ``VKSDK_PROFILE`` environment variable
        3. ``default_profile`` in the global config
        4. The only profile on disk, if ``auto_select_single_profile`` is set

    ``VKSDK_API_VERSION`` overrides the resolved profile's ``api_version``.

    Returns:
        A tuple of ``(global_config, active_profile_or_None)``.
    """
    global_cfg = load_global_config()

    resolved_name: Optional[str] = global_cfg.default_profile
    env_profile = os.environ.get(ENV_PROFILE)
    if env_profile:
        resolved_name = env_profile
    if cli_profile is not None:
        resolved_name = cli_profile

    if resolved_name is None and global_cfg.auto_select_single_profile:
        profiles = list_profiles()
        if len(profiles) == 1:
            resolved_name = profiles[0]

    profile: Optional[Profile] = None
    if resolved_name is not None:
        profile = load_profile(resolved_name)
        env_version = os.environ.get(ENV_API_VERSION)
        if env_version:
            profile.api_version = env_version

    return global_cfg, profile


# --- Credential source resolution ---


def resolve_credential(source: str) -> str:
    """Resolve a credential from its source descriptor.

    Supported formats:
        - ``"env:VAR_NAME"`` -- reads ``os.environ["VAR_NAME"]``
        - ``"file:/path/to/file"`` -- reads file content, stripped of whitespace
        - ``"prompt"`` -- prompts interactively (requires a TTY)
        - ``"store:PROFILE"`` -- reads the token saved for the named profile

    Raises:
        ConfigError: If the source can't be resolved.
    """
    if source.startswith("env:"):
        var_name = source[4:]
        value = os.environ.get(var_name)
        if value is None:
            raise ConfigError(
                f"Environment variable '{var_name}' is not set (source: {source})"
            )
        return value

    if source.startswith("file:"):
        path = Path(source[5:]).expanduser()
        if not path.is_file():
            raise ConfigError(f"Credential file not found: {path} (source: {source})")
        try:
            return path.read_text(encoding="utf-8").strip()
        except OSError as exc:
            raise ConfigError(f"Cannot read credential file {path}: {exc}") from exc

    if source == "prompt":
        if not sys.stdin.isatty():
            raise ConfigError(
                "Cannot prompt for credentials: stdin is not a TTY (source: prompt)"
            )
        return getpass.getpass("Enter credential: ")

    if source.startswith("store:"):
        profile_name = source[6:]
        from vksdk.auth.credential_store import TokenStore

        entry = TokenStore(profile_name).load_valid()
        if entry is None:
            raise ConfigError(
                f"No valid token in store for profile '{profile_name}' "
                f"(source: {source})"
            )
        return entry.access_token

    raise ConfigError(f"Unknown credential source format: {source}")
