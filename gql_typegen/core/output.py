"""Aggregation of rendered chunks into output files, and file sinks."""

import ast
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from typing import Iterator, Protocol, Sequence, runtime_checkable

from .hooks import HookRunner

logger = logging.getLogger(__name__)

FILE_HEADER = (
    "# Code generated by gql-typegen. DO NOT EDIT.\n"
    "# Package: {package}\n"
    "\n"
    "from __future__ import annotations\n"
)


@dataclass
class OutputFile:
    """Accumulates the imports and chunks of one generated file.

    Imports are unique by exact string equality; all lists keep the
    order in which entries were first added. Deferred imports are written
    after the last chunk.
    """
    package: str
    imports: list[str] = field(default_factory=list)
    chunks: list[str] = field(default_factory=list)
    deferred_imports: list[str] = field(default_factory=list)

    def has_import(self, statement: str) -> bool:
        return statement in self.imports

    def add(self, imports: list[str], chunk: str, deferred_imports: Sequence[str] = ()):
        """Append a chunk and any imports not seen before."""
        for statement in imports:
            if not self.has_import(statement):
                self.imports.append(statement)
        for statement in deferred_imports:
            if statement not in self.deferred_imports:
                self.deferred_imports.append(statement)
        self.chunks.append(chunk)


class OutputFiles:
    """Output files of one generation run, keyed by file path."""

    def __init__(self):
        self._files: dict[str, OutputFile] = {}

    def get(self, file: str, package: str) -> OutputFile:
        """Return the accumulator for ``file``, creating it on first use."""
        output = self._files.get(file)
        if output is None:
            output = OutputFile(package=package)
            self._files[file] = output
        return output

    def __getitem__(self, file: str) -> OutputFile:
        return self._files[file]

    def __contains__(self, file: object) -> bool:
        return file in self._files

    def __len__(self) -> int:
        return len(self._files)

    def __iter__(self) -> Iterator[str]:
        return iter(self._files)

    def items(self) -> Iterator[tuple[str, OutputFile]]:
        return iter(self._files.items())


def render_file(package: str, imports: list[str], chunks: list[str],
                deferred_imports: Sequence[str] = ()) -> str:
    """Render the text of a generated file.

    Header first, then the import block if there is one, then each chunk
    preceded by two blank lines, then the deferred imports.
    """
    parts = [FILE_HEADER.format(package=package)]
    if imports:
        parts.append("\n" + "\n".join(imports) + "\n")
    for chunk in chunks:
        parts.append("\n\n" + chunk)
    if deferred_imports:
        tail = "".join(f"{statement}  # noqa: E402\n" for statement in deferred_imports)
        parts.append("\n\n" + tail)
    return "".join(parts)


@runtime_checkable
class FileSink(Protocol):
    """Destination for generated files."""

    def write(self, file: str, package: str, imports: list[str], chunks: list[str],
              deferred_imports: Sequence[str] = ()) -> None:
        """Write one generated file."""
        ...


class MemorySink:
    """Collects rendered files in memory, keyed by file path."""

    def __init__(self, hooks: HookRunner | None = None):
        self.files: dict[str, str] = {}
        self.hooks = hooks or HookRunner()

    def write(self, file: str, package: str, imports: list[str], chunks: list[str],
              deferred_imports: Sequence[str] = ()) -> None:
        content = render_file(package, imports, chunks, deferred_imports)
        self.files[file] = self.hooks.run_post_hooks(file, content)


class DirectorySink:
    """Writes generated files under ``<output_dir>/<package>/``.

    Parent directories are created and marked as packages with an empty
    ``__init__.py``. Existing files are truncated. Every file is checked
    with ``ast.parse`` before it is written.
    """

    def __init__(self, output_dir: str | os.PathLike, hooks: HookRunner | None = None):
        self.output_dir = Path(output_dir)
        self.hooks = hooks or HookRunner()

    def write(self, file: str, package: str, imports: list[str], chunks: list[str],
              deferred_imports: Sequence[str] = ()) -> None:
        content = render_file(package, imports, chunks, deferred_imports)
        content = self.hooks.run_post_hooks(file, content)

        try:
            ast.parse(content)
        except SyntaxError as e:
            raise ValueError(f"Generated invalid Python for {file}: {e}") from e

        package_dir = self.output_dir / package
        full_path = package_dir / file
        full_path.parent.mkdir(parents=True, exist_ok=True)
        self._ensure_init_files(package_dir, PurePosixPath(file).parent)

        with open(full_path, "w") as f:
            f.write(content)
        logger.debug("wrote %s", full_path)

    @staticmethod
    def _ensure_init_files(package_dir: Path, subdir: PurePosixPath):
        directory = package_dir
        for part in ("",) + subdir.parts:
            if part:
                directory = directory / part
            init_file = directory / "__init__.py"
            if not init_file.exists():
                init_file.write_text('"""Generated GraphQL models."""\n')
