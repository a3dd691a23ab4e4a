"""Replicate a source tree into an output tree of transformed files."""

from __future__ import annotations

import logging
import os
import tempfile
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

logger = logging.getLogger(__name__)


class SkipReason(str, Enum):
    UNREADABLE = "unreadable"
    NOT_UTF8 = "not-utf8"
    ANNOTATION_FAILED = "annotation-failed"
    MKDIR_FAILED = "mkdir-failed"
    WRITE_FAILED = "write-failed"


@dataclass(frozen=True)
class FileTask:
    input_path: Path
    output_path: Path


@dataclass(frozen=True)
class FileOutcome:
    task: FileTask
    skip_reason: SkipReason | None = None
    detail: str = ""

    @property
    def ok(self) -> bool:
        return self.skip_reason is None


@dataclass
class MirrorReport:
    outcomes: list[FileOutcome] = field(default_factory=list)

    @property
    def written(self) -> list[FileOutcome]:
        return [o for o in self.outcomes if o.ok]

    @property
    def skipped(self) -> list[FileOutcome]:
        return [o for o in self.outcomes if not o.ok]


def has_extension(path: Path, extension: str) -> bool:
    return path.suffix == f".{extension.lstrip('.')}"


def iter_source_files(root: Path, extension: str, exclude: Path | None = None) -> Iterator[Path]:
    """Yield matching regular files depth-first, entries sorted by name in each directory.

    Symlinked directories are not followed; ``exclude`` prunes a subtree.
    """
    excluded = exclude.resolve() if exclude is not None else None
    try:
        entries = sorted(root.iterdir(), key=lambda p: p.name)
    except OSError as exc:
        logger.warning("Cannot list %s: %s", root, exc)
        return
    for entry in entries:
        if entry.is_dir() and not entry.is_symlink():
            if excluded is not None and entry.resolve() == excluded:
                continue
            yield from iter_source_files(entry, extension, exclude)
        elif entry.is_file() and has_extension(entry, extension):
            yield entry


def plan_task(path: Path, input_root: Path, output_root: Path) -> FileTask:
    return FileTask(input_path=path, output_path=output_root / path.relative_to(input_root))


def _default_file_mode() -> int:
    # os.umask can only be read by setting it.
    umask = os.umask(0)
    os.umask(umask)
    return 0o666 & ~umask


def _write_atomic(path: Path, data: bytes) -> None:
    """Replace ``path`` with ``data`` in one step, with the mode a plain open() would give it."""
    with tempfile.NamedTemporaryFile(dir=path.parent, prefix=f".{path.name}.", delete=False) as temp_file:
        temp_path = Path(temp_file.name)
        try:
            temp_file.write(data)
            temp_path.chmod(_default_file_mode())
        except BaseException:
            temp_file.close()
            temp_path.unlink(missing_ok=True)
            raise
    try:
        os.replace(temp_path, path)
    except OSError:
        temp_path.unlink(missing_ok=True)
        raise


def process_file(task: FileTask, transform: Callable[[str], bytes]) -> FileOutcome:
    """Transform one file; every failure becomes a skip outcome instead of an exception."""
    try:
        text = task.input_path.read_bytes().decode("utf-8")
    except UnicodeDecodeError as exc:
        return FileOutcome(task, SkipReason.NOT_UTF8, str(exc))
    except OSError as exc:
        return FileOutcome(task, SkipReason.UNREADABLE, str(exc))

    try:
        data = transform(text)
    except ValueError as exc:
        return FileOutcome(task, SkipReason.ANNOTATION_FAILED, str(exc))

    try:
        task.output_path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        return FileOutcome(task, SkipReason.MKDIR_FAILED, str(exc))

    try:
        _write_atomic(task.output_path, data)
    except OSError as exc:
        return FileOutcome(task, SkipReason.WRITE_FAILED, str(exc))
    return FileOutcome(task)


def mirror(
    input_root: str | Path,
    output_root: str | Path,
    transform: Callable[[str], bytes],
    extension: str = "rs",
    on_outcome: Callable[[FileOutcome], None] | None = None,
) -> MirrorReport:
    """Write ``transform(text)`` of every matching file under ``input_root`` to ``output_root``.

    The relative layout is preserved. Files are handled one at a time and a
    failing file never stops the walk.
    """
    input_root = Path(input_root)
    output_root = Path(output_root)
    report = MirrorReport()
    for path in iter_source_files(input_root, extension, exclude=output_root):
        outcome = process_file(plan_task(path, input_root, output_root), transform)
        if not outcome.ok:
            logger.warning("Skipped %s (%s): %s", path, outcome.skip_reason.value, outcome.detail)  # type: ignore[union-attr]
        report.outcomes.append(outcome)
        if on_outcome is not None:
            on_outcome(outcome)
    return report
