"""Parameter sources and validation for hostdeploy runs"""

import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from dotenv import dotenv_values

from hostdeploy.constants import (
    DEFAULT_BRANCH,
    DEFAULT_LOCAL_DIR,
    DEFAULT_PUBLIC_PORT,
    ENV_TOKEN_KEY,
    REPO_URL_PREFIXES,
)
from hostdeploy.exceptions import ConfigurationError
from hostdeploy.models.params import Secret

PARAMETER_FIELDS = (
    "repo_url",
    "branch",
    "remote_user",
    "remote_host",
    "ssh_key_path",
    "app_port",
    "local_dir",
    "public_port",
)

REMOTE_FIELDS = ("remote_user", "remote_host", "ssh_key_path")

DEFAULTS: Dict[str, Any] = {
    "branch": DEFAULT_BRANCH,
    "local_dir": DEFAULT_LOCAL_DIR,
    "public_port": DEFAULT_PUBLIC_PORT,
}


def load_parameter_file(path: Path) -> Dict[str, Any]:
    """
    Load deployment parameters from a YAML file.

    Args:
        path: Path to the parameter file

    Returns:
        Mapping of parameter name to value

    Raises:
        ConfigurationError: If the file is missing, unreadable or has unknown keys
    """
    path = Path(path).expanduser()
    if not path.exists():
        raise ConfigurationError(f"Parameter file not found: {path}")

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {path}", context=str(e))

    if not isinstance(data, dict):
        raise ConfigurationError(f"{path} must contain a mapping of parameters")

    unknown = sorted(set(data) - set(PARAMETER_FIELDS))
    if unknown:
        raise ConfigurationError(
            f"Unknown parameter(s) in {path}: {', '.join(unknown)}",
            context=f"Allowed: {', '.join(PARAMETER_FIELDS)} (tokens belong in .env)",
        )
    return data


def find_env_file() -> Optional[Path]:
    """Smart .env file detection"""
    search_paths = [
        Path.cwd() / ".env",
        Path.home() / ".hostdeploy" / ".env",
    ]

    for path in search_paths:
        if path.exists():
            return path

    return None


def load_credential(env_file: Optional[Path] = None) -> Optional[Secret]:
    """Read the repository token from the environment or a .env file."""
    value = os.environ.get(ENV_TOKEN_KEY)
    if not value:
        env_file = env_file or find_env_file()
        if env_file:
            value = dotenv_values(env_file).get(ENV_TOKEN_KEY)
    return Secret(value) if value else None


def merge_layers(*layers: Dict[str, Any]) -> Dict[str, Any]:
    """Merge parameter layers; later layers win, None never overrides."""
    merged = dict(DEFAULTS)
    for layer in layers:
        for key, value in (layer or {}).items():
            if value is not None and value != "":
                merged[key] = value
    return merged


# ---------------------------------------------------------------------------
# Validators: each returns the normalized value or raises ConfigurationError
# ---------------------------------------------------------------------------


def validate_repo_url(value: Any) -> str:
    url = str(value or "").strip()
    if not url:
        raise ConfigurationError("Repository URL cannot be empty.")
    if not url.startswith(REPO_URL_PREFIXES):
        raise ConfigurationError(
            "Repository URL looks invalid. Start with https://, http://, git@ or ssh://"
        )
    return url


def validate_required(label: str, value: Any) -> str:
    text = str(value or "").strip()
    if not text:
        raise ConfigurationError(f"{label} required.")
    return text


def validate_port(value: Any, label: str = "Port") -> int:
    text = str(value).strip()
    if not text.isdigit() or not 1 <= int(text) <= 65535:
        raise ConfigurationError(f"Invalid {label.lower()}. Enter a number between 1 and 65535.")
    return int(text)


def expand_path(value: Any) -> str:
    """Trim surrounding whitespace and quotes, expand ~."""
    text = str(value or "").strip().strip("'\"")
    return str(Path(text).expanduser()) if text else text


def validate_key_path(value: Any) -> str:
    path = expand_path(value)
    if not path or not Path(path).is_file():
        raise ConfigurationError(
            f"SSH key not found at '{path}'. Please provide a correct path."
        )
    return path


def key_permissions(path: str) -> str:
    try:
        return oct(Path(path).stat().st_mode & 0o777)[2:]
    except OSError:
        return "unknown"


def validate_local_dir(value: Any) -> str:
    path = expand_path(value) or DEFAULT_LOCAL_DIR
    try:
        Path(path).mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise ConfigurationError(f"Cannot create local directory '{path}'", context=str(e))
    return path


VALIDATORS = {
    "repo_url": validate_repo_url,
    "branch": lambda v: validate_required("Branch", v),
    "remote_user": lambda v: validate_required("Username", v),
    "remote_host": lambda v: validate_required("Host/IP", v),
    "ssh_key_path": validate_key_path,
    "app_port": lambda v: validate_port(v, "Port"),
    "local_dir": validate_local_dir,
    "public_port": lambda v: validate_port(v, "Public port"),
}
