"""External pretty-printer invocation (HTML on stdin, formatted HTML on stdout)."""

from __future__ import annotations

import logging
import shutil
import subprocess
from dataclasses import dataclass
from typing import Protocol

logger = logging.getLogger(__name__)

DEFAULT_COMMAND = ("prettier", "--parser", "html", "--print-width", "100")
DEFAULT_TIMEOUT = 5.0


class FormatterError(Exception):
    """Raised when the external formatter is missing, fails, or times out."""


class Formatter(Protocol):
    def format(self, html: str) -> str: ...


@dataclass(frozen=True)
class ExternalFormatter:
    """Runs a pretty-printer executable with a bounded wait."""

    command: tuple[str, ...] = DEFAULT_COMMAND
    timeout: float = DEFAULT_TIMEOUT

    @property
    def name(self) -> str:
        return self.command[0] if self.command else ""

    def format(self, html: str) -> str:
        """Pipe *html* through the formatter and return its stdout."""
        if not self.command:
            raise FormatterError("no formatter command configured")

        executable = shutil.which(self.command[0])
        if executable is None:
            raise FormatterError(f"formatter '{self.name}' not found")

        logger.debug("running formatter %s", " ".join(self.command))
        try:
            result = subprocess.run(
                [executable, *self.command[1:]],
                input=html,
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired:
            raise FormatterError(
                f"formatter '{self.name}' timed out after {self.timeout}s"
            ) from None
        except OSError as exc:
            raise FormatterError(f"formatter '{self.name}' could not be started: {exc}") from exc

        if result.returncode != 0:
            stderr = result.stderr.strip()
            msg = f"formatter '{self.name}' failed (exit {result.returncode})"
            if stderr:
                msg += f": {stderr}"
            raise FormatterError(msg)

        return result.stdout
