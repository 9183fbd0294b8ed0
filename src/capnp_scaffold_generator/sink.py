"""Output sinks that turn an artifact path into a writable stream."""

from __future__ import annotations

import logging
import os.path
from typing import BinaryIO, Protocol

logger = logging.getLogger(__name__)


class OutputSink(Protocol):
    """Opens artifacts for writing.

    Paths are relative and use `/` as separator. The generators open every path at most
    once per run and never read back what they wrote.
    """

    def open(self, path: str) -> BinaryIO: ...


class DirectoryOutputSink:
    """Writes artifacts below a root directory, creating directories as needed."""

    def __init__(self, root: str):
        self.root = root
        self.written: list[str] = []

    def open(self, path: str) -> BinaryIO:
        """Open an artifact for writing, replacing an existing file.

        Args:
            path (str): The artifact path relative to the root directory.

        Returns:
            BinaryIO: The opened stream.
        """
        full_path = os.path.join(self.root, *path.split("/"))
        os.makedirs(os.path.dirname(full_path) or ".", exist_ok=True)
        stream = open(full_path, "wb")
        self.written.append(path)
        logger.debug("Writing %s", full_path)
        return stream
