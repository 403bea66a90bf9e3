# src/repofetch/secrets.py
"""Secret lookup for authenticating remote operations, with a literal fallback."""

import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Iterable, Mapping, Optional

import keyring
from dotenv import dotenv_values, find_dotenv
from keyring.errors import KeyringError

from .util.log import get_logger

logger = get_logger(__name__)

DEFAULT_FALLBACK = "default"


class SecretProvider(ABC):
    """Looks up configuration values by name."""

    @abstractmethod
    def get(self, name: str) -> Optional[str]:
        """Return the value for `name`, or None if it is not set."""


class DotenvSecretProvider(SecretProvider):
    """
    Reads the process environment, then a dotenv file.

    The dotenv file is re-read on every lookup so edits take effect without a
    restart. Variables already present in the environment take precedence over
    the file. A relative `env_file` is searched for from the current directory
    upwards.
    """

    def __init__(self, env_file: Path = Path(".env")):
        self.env_file = Path(env_file)

    def _resolve_env_file(self) -> Optional[Path]:
        if self.env_file.is_absolute():
            return self.env_file if self.env_file.is_file() else None
        found = find_dotenv(str(self.env_file), usecwd=True)
        return Path(found) if found else None

    def get(self, name: str) -> Optional[str]:
        value = os.environ.get(name)
        if value is not None:
            return value
        env_file = self._resolve_env_file()
        if env_file is None:
            return None
        try:
            values = dotenv_values(env_file)
        except (OSError, ValueError) as e:
            logger.warning(f"Could not read dotenv file {env_file}: {e}")
            return None
        return values.get(name)


class StaticSecretProvider(SecretProvider):
    """Serves values from a fixed mapping."""

    def __init__(self, values: Mapping[str, str]):
        self.values = dict(values)

    def get(self, name: str) -> Optional[str]:
        return self.values.get(name)


class KeyringSecretProvider(SecretProvider):
    """Reads values stored in the OS keyring under a service name."""

    def __init__(self, service: str):
        self.service = service

    def get(self, name: str) -> Optional[str]:
        try:
            return keyring.get_password(self.service, name)
        except KeyringError as e:
            # No usable backend (headless Linux, locked keychain) means "not set".
            logger.debug(f"Keyring lookup for '{name}' unavailable: {e}")
            return None


class ChainSecretProvider(SecretProvider):
    """Returns the first value any of its providers knows about."""

    def __init__(self, providers: Iterable[SecretProvider]):
        self.providers = list(providers)

    def get(self, name: str) -> Optional[str]:
        for provider in self.providers:
            value = provider.get(name)
            if value is not None:
                return value
        return None


def read_secret(provider: SecretProvider, name: str, fallback: str = DEFAULT_FALLBACK) -> str:
    """Look up `name`, returning `fallback` when it is unset."""
    value = provider.get(name)
    return fallback if value is None else value
