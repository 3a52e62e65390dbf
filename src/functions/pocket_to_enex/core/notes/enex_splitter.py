"""Split a large ENEX archive into several smaller ones."""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import List

logger = logging.getLogger(__name__)

_NOTE_PATTERN = re.compile(r"<note>.*?</note>", re.DOTALL)
_NOTE_CLOSE = "</note>"


class SplitError(ValueError):
    """Raised when an archive cannot be split."""


def split_enex(
    input_path: str | Path,
    output_dir: str | Path,
    notes_per_file: int = 1000,
) -> List[Path]:
    """Write ``<base>_partNNN.enex`` files holding at most ``notes_per_file`` notes.

    The text before the first note and after the last one is copied to every
    part, so each part is a complete archive.

    Returns:
        Written file paths in order

    Raises:
        SplitError: On a missing input, an archive without notes or a
            non-positive chunk size
    """

    if notes_per_file <= 0:
        raise SplitError("Notes per file must be a positive number")

    source = Path(input_path)
    if not source.exists():
        raise SplitError(f"Input file does not exist: {source}")

    size_mb = source.stat().st_size / 1024 / 1024
    logger.info("Reading ENEX file: %s (%.2f MB)", source, size_mb)
    content = source.read_text(encoding="utf-8")

    notes = _NOTE_PATTERN.findall(content)
    if not notes:
        raise SplitError("No notes found in the ENEX file")

    header = content[: content.index("<note>")]
    footer = content[content.rindex(_NOTE_CLOSE) + len(_NOTE_CLOSE):]

    target_dir = Path(output_dir)
    target_dir.mkdir(parents=True, exist_ok=True)

    base = source.name[: -len(".enex")] if source.name.endswith(".enex") else source.name
    total_files = -(-len(notes) // notes_per_file)
    logger.info(
        "Splitting %d notes into %d files (%d notes per file)",
        len(notes),
        total_files,
        notes_per_file,
    )

    written: List[Path] = []
    for file_index in range(total_files):
        chunk = notes[file_index * notes_per_file:(file_index + 1) * notes_per_file]
        path = target_dir / f"{base}_part{file_index + 1:03d}.enex"
        path.write_text(header + "\n".join(chunk) + footer, encoding="utf-8")
        written.append(path)
        logger.info("Created %s (%d notes)", path.name, len(chunk))

    return written
