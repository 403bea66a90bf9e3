# src/repofetch/commands.py: Command-dispatch boundary.
# This module is the surface a host application calls. Each command runs its
# blocking work on the worker pool, catches every failure and hands back a
# CommandResult carrying descriptive text plus the error kind and failing
# step. No command raises to its caller.

from __future__ import annotations

from pathlib import Path
from typing import Optional

from pydantic import BaseModel

from .config import Config
from .extract import SubtreeExtractor
from .repoops import clone_at
from .secrets import (
    ChainSecretProvider,
    DotenvSecretProvider,
    KeyringSecretProvider,
    SecretProvider,
    read_secret,
)
from .util.errors import RepofetchError
from .util.fs import prune_directory
from .util.log import get_logger, operation
from .util.tasks import WorkerPool

logger = get_logger(__name__)


class CommandResult(BaseModel):
    """Outcome of one command: a message on success, an error otherwise."""
    ok: bool
    message: Optional[str] = None
    error: Optional[str] = None
    kind: Optional[str] = None
    step: Optional[str] = None

    @classmethod
    def success(cls, message: Optional[str] = None) -> CommandResult:
        return cls(ok=True, message=message)

    @classmethod
    def failure(cls, error: RepofetchError) -> CommandResult:
        return cls(ok=False, error=str(error), kind=error.kind.value, step=error.step)


def build_secret_provider(config: Config) -> SecretProvider:
    """Environment and dotenv file, plus the keyring when a service is configured."""
    dotenv = DotenvSecretProvider(config.secrets.env_file)
    if config.secrets.keyring_service is None:
        return dotenv
    return ChainSecretProvider([dotenv, KeyringSecretProvider(config.secrets.keyring_service)])


class Commands:
    """
    The four exposed operations, bound to an injected configuration.

    Args:
        config: Settings for git, scratch space and the worker pool.
        secrets: Provider consulted by `get_secret_key`. Defaults to the
            environment plus the configured dotenv file.
        pool: Worker pool for blocking work. One is created from `config`
            when omitted.
    """

    def __init__(
        self,
        config: Optional[Config] = None,
        secrets: Optional[SecretProvider] = None,
        pool: Optional[WorkerPool] = None,
    ):
        self.config = config or Config()
        self.secrets = secrets or build_secret_provider(self.config)
        self.pool = pool or WorkerPool(self.config.workers.max_workers)

    async def clone_repo(
        self, repo_url: str, destination: str, commit_sha: Optional[str] = None
    ) -> CommandResult:
        """Clone a repository, optionally pinned to a commit."""
        return await self._dispatch("clone", self._clone, repo_url, destination, commit_sha)

    async def extract_folder_from_repo(
        self, repo_url: str, folder_in_repo: str, destination_path: str
    ) -> CommandResult:
        """Extract one folder of a repository to a path that must not exist yet."""
        return await self._dispatch(
            "extract", self._extract, repo_url, folder_in_repo, destination_path
        )

    async def nuke_directory(self, path: str) -> CommandResult:
        """Empty a directory, keeping the directory itself."""
        return await self._dispatch("prune", prune_directory, Path(path))

    def get_secret_key(self, name: str) -> str:
        """Look up a configuration value, falling back to a literal default."""
        fallback = self.config.secrets.fallback
        try:
            return read_secret(self.secrets, name, fallback)
        except (OSError, ValueError) as e:
            logger.warning(f"Could not read secret '{name}', using fallback: {e}")
            return fallback

    def close(self) -> None:
        self.pool.shutdown()

    def _clone(self, repo_url: str, destination: str, commit_sha: Optional[str]) -> str:
        return clone_at(repo_url, destination, commit_sha, self.config.git).describe()

    def _extract(self, repo_url: str, folder_in_repo: str, destination_path: str) -> str:
        SubtreeExtractor(self.config).extract(repo_url, folder_in_repo, destination_path)
        return f"Folder '{folder_in_repo}' extracted to '{destination_path}'"

    async def _dispatch(self, name: str, func, *args) -> CommandResult:
        with operation(name):
            try:
                message = await self.pool.run(func, *args)
            except RepofetchError as e:
                logger.warning(f"{name} failed at step '{e.step}': {e}")
                return CommandResult.failure(e)
            logger.info(f"{name} succeeded")
            return CommandResult.success(message)
