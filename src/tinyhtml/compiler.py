"""Compilation front end: sources, files, directories, and project layouts."""

from __future__ import annotations

import logging
import sys
import time
from dataclasses import dataclass, field
from pathlib import Path

from tinyhtml.cache import LRUCache
from tinyhtml.errors import TmlError
from tinyhtml.formatter import Formatter
from tinyhtml.generator import Generator, GeneratorOptions
from tinyhtml.parser import parse

logger = logging.getLogger(__name__)

SOURCE_SUFFIX = ".tml"
OUTPUT_SUFFIX = ".html"
PROJECT_SOURCE_DIR = "tinyhtml-views"
PROJECT_OUTPUT_DIR = "views"


@dataclass
class CompilerStats:
    compilations: int = 0
    cache_hits: int = 0
    cache_misses: int = 0
    total_time: float = 0.0

    @property
    def average_time(self) -> float:
        return self.total_time / self.compilations if self.compilations else 0.0


@dataclass
class DirectoryReport:
    """Outcome of compiling a tree; one failing file never stops the others."""

    compiled: list[tuple[Path, Path]] = field(default_factory=list)
    failed: list[tuple[Path, Exception]] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed


class Compiler:
    """Parses and generates TML documents, caching file results by mtime."""

    def __init__(
        self,
        options: GeneratorOptions | None = None,
        *,
        formatter: Formatter | None = None,
        cache: LRUCache | None = None,
        debug: bool = False,
    ) -> None:
        self._generator = Generator(options, formatter)
        self._cache = cache if cache is not None else LRUCache()
        self._debug = debug
        self._stats = CompilerStats()

    def compile(self, source: str) -> str:
        """Compile TML source text to HTML."""
        start = time.perf_counter()
        forest = parse(source)
        if self._debug:
            from tinyhtml.debug import dump_ast

            dump_ast(forest, file=sys.stderr)
        html = self._generator.generate(forest)

        duration = time.perf_counter() - start
        self._stats.compilations += 1
        self._stats.total_time += duration
        logger.debug(
            "compiled %d chars to %d chars in %.3fs", len(source), len(html), duration
        )
        return html

    def compile_file(self, input_path: Path | str, output_path: Path | str | None = None) -> Path:
        """Compile one .tml file and return the path written."""
        source_path = Path(input_path)
        resolved = source_path.resolve()
        if not resolved.is_file():
            raise FileNotFoundError(f"input path is not a file: {resolved}")

        output = Path(output_path) if output_path else source_path.with_suffix(OUTPUT_SUFFIX)
        mtime = resolved.stat().st_mtime
        key = str(resolved)

        if self._cache.is_valid(key, mtime):
            html = self._cache.get(key)
            self._stats.cache_hits += 1
            logger.debug("using cached compilation for %s", resolved)
        else:
            html = self.compile(resolved.read_text(encoding="utf-8"))
            self._cache.set(key, html, mtime)
            self._stats.cache_misses += 1

        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(html, encoding="utf-8")
        logger.info("compiled %s -> %s", source_path, output)
        return output

    def compile_directory(
        self,
        source_dir: Path | str,
        output_dir: Path | str | None = None,
        *,
        recursive: bool = False,
    ) -> DirectoryReport:
        """Compile every .tml file in *source_dir*, mirroring it into *output_dir*."""
        src = Path(source_dir)
        if not src.is_dir():
            raise NotADirectoryError(f"path is not a directory: {src}")

        report = DirectoryReport()
        self._compile_tree(src, Path(output_dir) if output_dir else None, recursive, report)
        return report

    def _compile_tree(
        self,
        src: Path,
        out: Path | None,
        recursive: bool,
        report: DirectoryReport,
    ) -> None:
        for entry in sorted(src.iterdir()):
            if entry.is_dir():
                if recursive:
                    sub_out = out / entry.name if out is not None else None
                    self._compile_tree(entry, sub_out, recursive, report)
                continue
            if entry.suffix != SOURCE_SUFFIX or not entry.is_file():
                continue

            target = (out / entry.name if out is not None else entry).with_suffix(OUTPUT_SUFFIX)
            try:
                self.compile_file(entry, target)
            except (TmlError, OSError) as exc:
                logger.error("failed to compile %s: %s", entry, exc)
                report.failed.append((entry, exc))
            else:
                report.compiled.append((entry, target))

    def compile_project(
        self,
        root: Path | str = ".",
        source_dir: str = PROJECT_SOURCE_DIR,
        output_dir: str = PROJECT_OUTPUT_DIR,
    ) -> DirectoryReport:
        """Compile ``<root>/tinyhtml-views`` into ``<root>/views`` recursively."""
        root = Path(root)
        src = root / source_dir
        if not src.is_dir():
            raise FileNotFoundError(
                f"views directory not found: {src} "
                "(run 'tinyhtml --init' to create the project structure)"
            )
        return self.compile_directory(src, root / output_dir, recursive=True)

    def stats(self) -> CompilerStats:
        return self._stats

    def clear_cache(self) -> None:
        self._cache.clear()
        logger.info("compilation cache cleared")

    def cleanup_cache(self) -> int:
        removed = self._cache.cleanup()
        if removed:
            logger.debug("removed %d expired cache entries", removed)
        return removed

    def dispose(self) -> None:
        self._generator.dispose()
        self._cache.clear()


# ---------------------------------------------------------------------------
# Project scaffolding
# ---------------------------------------------------------------------------

_INDEX_TML = """\
!DOCTYPE html
html[lang="en"]:
  head:
    meta[charset="UTF-8"]
    meta[name="viewport"][content="width=device-width, initial-scale=1.0"]
    title: "My TinyHTML Project"
    style: |
      body { font-family: Arial, sans-serif; margin: 0; padding: 20px; }
      .container { max-width: 800px; margin: 0 auto; }
      .highlight { background: #f0f8ff; padding: 10px; border-radius: 5px; }
  body:
    div.container:
      h1: "Hello, TinyHTML!"
      div.highlight:
        p: "Welcome to your new TinyHTML project!"
        p: "Edit files in tinyhtml-views/ and run 'tinyhtml' to compile them."
      footer:
        p: "Created with TinyHTML"
"""

_ABOUT_TML = """\
!DOCTYPE html
html[lang="en"]:
  head:
    meta[charset="UTF-8"]
    title: "About - TinyHTML Project"
  body:
    div.container:
      h1: "About"
      p: "This is the about page of your TinyHTML project."
      a[href="index.html"]: "Back to Home"
"""

_CONFIG_TOML = f"""\
[output]
indent_width = 2
indent_style = "spaces"
minify = false

[format]
enabled = true

[project]
source = "{PROJECT_SOURCE_DIR}"
output = "{PROJECT_OUTPUT_DIR}"
"""


def init_project(root: Path | str = ".") -> list[Path]:
    """Create the project skeleton under *root*; existing files are kept."""
    root = Path(root)
    created: list[Path] = []

    for directory in (root / PROJECT_SOURCE_DIR, root / PROJECT_OUTPUT_DIR):
        if not directory.exists():
            directory.mkdir(parents=True)
            created.append(directory)

    files = {
        root / "tinyhtml.toml": _CONFIG_TOML,
        root / PROJECT_SOURCE_DIR / "index.tml": _INDEX_TML,
        root / PROJECT_SOURCE_DIR / "about.tml": _ABOUT_TML,
    }
    for path, content in files.items():
        if not path.exists():
            path.write_text(content, encoding="utf-8")
            created.append(path)

    return created
