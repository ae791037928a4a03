"""Account configuration for PyCMS.

Accounts live in a JSON file named ``pycms.config.json``::

    {
        "defaultAccount": "prod",
        "defaultMode": "publish",
        "accounts": [
            {"name": "prod", "accountId": 123456, "apiKey": "...", "env": "prod"}
        ]
    }

The file is located (first match wins) via an explicit path, the
``PYCMS_CONFIG`` environment variable, a search from the working directory
upward, or ``~/.config/pycms/config.json``.
"""

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional, Union

from pathspec import PathSpec

from .exceptions import CmsConfigError

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = "pycms.config.json"
CONFIG_ENV_VAR = "PYCMS_CONFIG"

# Variables read when --use-env is passed
ENV_ACCOUNT_ID = "PYCMS_ACCOUNT_ID"
ENV_API_KEY = "PYCMS_API_KEY"
ENV_ENVIRONMENT = "PYCMS_ENV"

ENVIRONMENTS = ("prod", "qa")

API_URLS = {
    "prod": "https://api.hubapi.com",
    "qa": "https://api.hubapiqa.com",
}


@dataclass
class AccountConfig:
    """A single configured CMS account."""

    account_id: int
    """Numeric account (portal) identifier"""

    api_key: Optional[str] = None
    """API key sent with every request"""

    name: Optional[str] = None
    """Human-friendly account name"""

    env: str = "prod"
    """Backend environment, one of ``ENVIRONMENTS``"""

    default_mode: Optional[str] = None
    """Upload mode used when ``--mode`` is not given"""

    @property
    def api_url(self) -> str:
        return API_URLS.get(self.env, API_URLS["prod"])

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AccountConfig":
        """Build an account from its JSON representation.

        Raises:
            CmsConfigError: If the entry is not an object or ``accountId`` is
                missing or not an integer
        """
        if not isinstance(data, dict):
            raise CmsConfigError(f"Account entries must be objects, got {data!r}")
        try:
            account_id = int(data["accountId"])
        except (KeyError, TypeError, ValueError) as e:
            raise CmsConfigError(
                f"Account entry {data.get('name')!r} has no valid accountId"
            ) from e
        env = str(data.get("env") or "prod").lower()
        if env not in ENVIRONMENTS:
            raise CmsConfigError(
                f"Account {account_id} has unknown env {env!r}, "
                f"expected one of: {', '.join(ENVIRONMENTS)}"
            )
        return cls(
            account_id=account_id,
            api_key=data.get("apiKey"),
            name=data.get("name"),
            env=env,
            default_mode=data.get("defaultMode"),
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "name": self.name,
            "accountId": self.account_id,
            "apiKey": self.api_key,
            "env": self.env,
        }
        if self.default_mode:
            data["defaultMode"] = self.default_mode
        return data


def find_config_file(start: Optional[Path] = None) -> Optional[Path]:
    """Search for ``pycms.config.json`` from ``start`` upward.

    Args:
        start: Directory to start searching from (defaults to cwd)

    Returns:
        Path to the config file, or None if none was found
    """
    current = (start or Path.cwd()).resolve()
    for directory in [current, *current.parents]:
        candidate = directory / CONFIG_FILE_NAME
        if candidate.is_file():
            return candidate
    return None


def get_user_config_path() -> Path:
    """Get the per-user fallback config location."""
    return Path.home() / ".config" / "pycms" / "config.json"


class Config:
    """Loaded account configuration."""

    def __init__(self) -> None:
        self.config_path: Optional[Path] = None
        self.default_account: Optional[str] = None
        self.default_mode: Optional[str] = None
        self.accounts: list[AccountConfig] = []
        self.use_env = False

    def reset(self) -> None:
        self.config_path = None
        self.default_account = None
        self.default_mode = None
        self.accounts = []
        self.use_env = False

    def load(
        self, path: Optional[Union[str, Path]] = None, use_env: bool = False
    ) -> "Config":
        """Load configuration from disk or from environment variables.

        Args:
            path: Explicit config file path (``--config``)
            use_env: Build the account from ``PYCMS_*`` environment variables
                instead of reading a file

        Returns:
            self, for chaining

        Raises:
            CmsConfigError: If the file exists but cannot be parsed
        """
        self.reset()
        self.use_env = use_env

        if use_env:
            self._load_from_env()
            return self

        config_path = self._locate(path)
        if config_path is None:
            logger.debug("No config file found")
            return self

        self.config_path = config_path
        logger.debug(f"Loading config from {config_path}")
        try:
            with open(config_path, encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError as e:
            raise CmsConfigError(f"Config file not found: {config_path}") from e
        except json.JSONDecodeError as e:
            raise CmsConfigError(f"Invalid JSON in {config_path}: {e}") from e
        except (OSError, UnicodeDecodeError) as e:
            raise CmsConfigError(f"Could not read {config_path}: {e}") from e

        if not isinstance(data, dict):
            raise CmsConfigError(f"Config file {config_path} must contain an object")

        accounts = data.get("accounts") or []
        if not isinstance(accounts, list):
            raise CmsConfigError("'accounts' must be a list")

        self.accounts = [AccountConfig.from_dict(entry) for entry in accounts]
        default_account = data.get("defaultAccount")
        self.default_account = (
            str(default_account) if default_account is not None else None
        )
        self.default_mode = data.get("defaultMode")
        return self

    def _locate(self, path: Optional[Union[str, Path]]) -> Optional[Path]:
        if path:
            return Path(path).expanduser().resolve()
        env_path = os.environ.get(CONFIG_ENV_VAR)
        if env_path:
            return Path(env_path).expanduser().resolve()
        found = find_config_file()
        if found:
            return found
        user_path = get_user_config_path()
        return user_path if user_path.is_file() else None

    def _load_from_env(self) -> None:
        account_id = os.environ.get(ENV_ACCOUNT_ID)
        if not account_id:
            logger.debug(f"{ENV_ACCOUNT_ID} is not set")
            return
        account = AccountConfig.from_dict(
            {
                "accountId": account_id,
                "apiKey": os.environ.get(ENV_API_KEY),
                "env": os.environ.get(ENV_ENVIRONMENT) or "prod",
                "name": "env",
            }
        )
        self.accounts = [account]
        self.default_account = str(account.account_id)

    @property
    def is_configured(self) -> bool:
        return bool(self.accounts)

    def get_account(self, name_or_id: Optional[str] = None) -> Optional[AccountConfig]:
        """Find an account by name or numeric ID.

        Args:
            name_or_id: Account name or ID; the default account if omitted

        Returns:
            Matching AccountConfig, or None
        """
        wanted = name_or_id if name_or_id is not None else self.default_account
        if wanted is None:
            # A single configured account is implicitly the default
            return self.accounts[0] if len(self.accounts) == 1 else None

        wanted = str(wanted)
        for account in self.accounts:
            if account.name == wanted or str(account.account_id) == wanted:
                return account
        return None

    def get_config_path(self) -> Path:
        return self.config_path or Path.cwd() / CONFIG_FILE_NAME

    def save_account(self, account: AccountConfig, make_default: bool = True) -> Path:
        """Add or replace an account and write the config file.

        Args:
            account: Account to store
            make_default: Whether to mark it as the default account

        Returns:
            Path of the written config file
        """
        self.accounts = [
            a for a in self.accounts if a.account_id != account.account_id
        ]
        self.accounts.append(account)
        if make_default or self.default_account is None:
            self.default_account = account.name or str(account.account_id)

        config_path = self.get_config_path()
        config_path.parent.mkdir(parents=True, exist_ok=True)
        data: dict[str, Any] = {
            "defaultAccount": self.default_account,
            "accounts": [a.to_dict() for a in self.accounts],
        }
        if self.default_mode:
            data["defaultMode"] = self.default_mode
        with open(config_path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)
            f.write("\n")
        self.config_path = config_path
        return config_path


def check_and_warn_git_inclusion(config_path: Optional[Path]) -> Optional[str]:
    """Check whether a config file could be committed to git by accident.

    Args:
        config_path: Path of the loaded config file

    Returns:
        A warning message if the file sits inside a git work tree and is
        not matched by that work tree's ``.gitignore``, otherwise None
    """
    if config_path is None:
        return None

    config_path = config_path.resolve()
    for directory in config_path.parents:
        if (directory / ".git").exists():
            gitignore = directory / ".gitignore"
            if gitignore.is_file():
                try:
                    lines = gitignore.read_text(encoding="utf-8").splitlines()
                except (OSError, UnicodeDecodeError) as e:
                    logger.debug(f"Could not read {gitignore}: {e}")
                    lines = []
                spec = PathSpec.from_lines("gitwildmatch", lines)
                if spec.match_file(config_path.relative_to(directory).as_posix()):
                    return None
            return (
                f"The config file {config_path} is inside a git repository and "
                f"is not listed in .gitignore. It contains API keys and "
                f"should not be committed."
            )
    return None


config = Config()
