"""Archive reader: ZIP bytes in, ordered file entries out.

Every member is read eagerly so a corrupt archive is rejected as a whole
before the first remote write. The declared uncompressed sizes are summed
first and checked against a bound; ``zipfile`` never inflates a member past
its declared size, so the bound holds for the bytes actually read.
"""

import base64
import io
import json
import logging
import posixpath
import zipfile
import zlib
from dataclasses import dataclass
from typing import List, Optional

from ..core.config import settings
from ..exceptions import CorruptArchiveError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ArchiveEntry:
    """One member of an archive, path relative to the archive root."""

    path: str
    content: bytes
    is_dir: bool = False

    @property
    def size(self) -> int:
        return len(self.content)


def read_archive(data: bytes, max_total_bytes: Optional[int] = None) -> List[ArchiveEntry]:
    """Decode *data* into file entries in archive order, directories dropped.

    Args:
        data: Raw archive bytes.
        max_total_bytes: Bound on the summed uncompressed size of all files.
            Defaults to ``settings.max_extracted_bytes``.

    Raises:
        CorruptArchiveError: If the bytes are not a readable ZIP archive or a
            member fails to decompress, or if the files would expand past
            *max_total_bytes*.
    """
    entries: List[ArchiveEntry] = []

    try:
        with zipfile.ZipFile(io.BytesIO(data)) as archive:
            members = [info for info in archive.infolist() if not info.is_dir()]
            _check_expanded_size(members, max_total_bytes)
            for info in members:
                entries.append(ArchiveEntry(path=info.filename, content=archive.read(info)))
    except (zipfile.BadZipFile, zipfile.LargeZipFile, zlib.error, NotImplementedError, EOFError) as e:
        raise CorruptArchiveError(str(e) or type(e).__name__) from e

    logger.debug("Read %d file(s) from archive (%d bytes)", len(entries), len(data))
    return entries


def _check_expanded_size(members: List[zipfile.ZipInfo], limit: Optional[int]) -> None:
    if limit is None:
        limit = settings.max_extracted_bytes
    total = sum(info.file_size for info in members)
    if total > limit:
        raise CorruptArchiveError(f"files expand to {total} bytes, the limit is {limit} bytes")


def destination_path(entry_path: str, preserve_structure: bool) -> str:
    """Repository path for an archive member.

    Keeps the full relative path when preserving structure, otherwise only
    the final segment.
    """
    if preserve_structure:
        return entry_path
    return posixpath.basename(entry_path.rstrip("/"))


def encode_content(content: bytes) -> str:
    """Base64 text, as the GitHub contents API expects."""
    return base64.b64encode(content).decode("ascii")


# ---------------------------------------------------------------------------
# Sample archive for trying the service end to end
# ---------------------------------------------------------------------------

_SAMPLE_FILES = {
    "README.md": "# Sample Project\n\nThis archive was generated automatically to try RepoPush.\n",
    "package.json": json.dumps(
        {
            "name": "sample-project",
            "version": "1.0.0",
            "description": "Sample project for RepoPush uploads",
        },
        indent=2,
    ),
    "src/index.js": "console.log('Hello, GitHub!');\n",
    "src/utils.js": "export function formatDate(date) {\n  return date.toISOString();\n}\n",
    "src/components/Button.jsx": (
        "import React from 'react';\n\n"
        "export default function Button({ children, onClick }) {\n"
        "  return <button onClick={onClick}>{children}</button>;\n"
        "}\n"
    ),
    "docs/installation.md": (
        "# Installation\n\n"
        "1. Clone the repository\n"
        "2. Install dependencies\n"
        "3. Start the application\n"
    ),
}


def build_sample_archive() -> bytes:
    """Build a small ZIP with nested folders, including explicit directory entries."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as archive:
        written_dirs = set()
        for path, text in _SAMPLE_FILES.items():
            parent = posixpath.dirname(path)
            if parent and parent not in written_dirs:
                archive.writestr(parent + "/", "")
                written_dirs.add(parent)
            archive.writestr(path, text)
    return buffer.getvalue()


def sample_file_count() -> int:
    return len(_SAMPLE_FILES)
