"""Zip extraction for downloaded job artifacts."""

from __future__ import annotations

import zipfile
import zlib
from pathlib import Path

from .exceptions import ArtifactExtractionError


def extract_archive(archive_path: Path, destination: Path) -> list[Path]:
    """Extract every member of *archive_path* into *destination*, overwriting existing files.

    Members that would land outside *destination* are rejected before
    anything is written. Returns the extracted file paths.
    """
    base = destination.resolve()
    try:
        with zipfile.ZipFile(archive_path) as zf:
            members = zf.infolist()
            for member in members:
                target = (base / member.filename).resolve()
                if not target.is_relative_to(base):
                    msg = f"Invalid archive member: {member.filename}"
                    raise ArtifactExtractionError(msg)
            zf.extractall(base)
    except ArtifactExtractionError:
        raise
    except (
        zipfile.BadZipFile,
        OSError,
        EOFError,
        NotImplementedError,
        RuntimeError,
        zlib.error,
    ) as e:
        msg = f"Could not extract {archive_path.name}: {e}"
        raise ArtifactExtractionError(msg) from e

    return [base / m.filename for m in members if not m.is_dir()]
