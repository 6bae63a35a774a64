import json
import os
import shutil
from pathlib import Path
from typing import Any, Union

import structlog

from .constants import SENSITIVE_FILE_MODE
from .errors import PreconditionError

logger = structlog.get_logger()


class ArtifactWriter:
    """Persists generated artifacts under a single destination root.

    ``prepare`` must run before any write: it refuses an existing root unless
    overwrite is requested, in which case the old root is removed first.
    """

    def __init__(self, root: Union[str, Path]):
        self.root = Path(root).expanduser()
        self._prepared = False

    def check(self, overwrite: bool) -> None:
        """
        Verify the destination can be written without touching the filesystem.

        Raises:
            PreconditionError: If the root exists and overwrite is not set
        """
        if self.root.exists() and not overwrite:
            raise PreconditionError(
                f"Destination {self.root} already exists; pass overwrite to replace it"
            )

    def prepare(self, overwrite: bool = False) -> None:
        """
        Create a fresh destination root.

        Args:
            overwrite: Remove an existing root instead of refusing

        Raises:
            PreconditionError: If the root exists and overwrite is not set
        """
        self.check(overwrite)
        if self.root.exists():
            logger.warning("destination_removed", path=str(self.root))
            if self.root.is_dir() and not self.root.is_symlink():
                shutil.rmtree(self.root)
            else:
                self.root.unlink()
        self.root.mkdir(parents=True)
        self._prepared = True
        logger.info("destination_prepared", path=str(self.root))

    def path(self, relpath: Union[str, Path]) -> Path:
        return self.root / relpath

    def _target(self, relpath: Union[str, Path]) -> Path:
        if not self._prepared:
            raise PreconditionError("Destination must be prepared before writing artifacts")
        target = self.path(relpath)
        target.parent.mkdir(parents=True, exist_ok=True)
        return target

    def write_text(self, relpath: Union[str, Path], text: str, sensitive: bool = False) -> Path:
        """Write text, creating sensitive files owner-readable only."""
        target = self._target(relpath)
        if sensitive:
            fd = os.open(target, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, SENSITIVE_FILE_MODE)
            with os.fdopen(fd, "w", newline="") as f:
                f.write(text)
            os.chmod(target, SENSITIVE_FILE_MODE)
        else:
            with open(target, "w", newline="") as f:
                f.write(text)
        logger.info("artifact_written", path=str(relpath), sensitive=sensitive)
        return target

    def write_json(self, relpath: Union[str, Path], data: Any, sensitive: bool = False) -> Path:
        return self.write_text(relpath, json.dumps(data, indent=2) + "\n", sensitive=sensitive)

    def read_text(self, relpath: Union[str, Path]) -> str:
        with open(self.path(relpath), newline="") as f:
            return f.read()

    def copy_tree(self, source: Union[str, Path], relpath: Union[str, Path]) -> Path:
        """Copy a template directory into the destination."""
        target = self._target(relpath)
        shutil.copytree(source, target, dirs_exist_ok=True)
        logger.info("template_copied", source=str(source), path=str(relpath))
        return target
