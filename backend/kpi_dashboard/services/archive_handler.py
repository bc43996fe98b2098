"""
Archive Handler — Upload Decoding and ZIP Support

Turns an uploaded payload into CSV text:
- ZIP archives: the first member whose name ends in .csv (archive order)
- Anything else: decoded directly
- Encoding detection (BOM, UTF-8, Latin-1, CP1252)
- Zip bomb protection (member count, size and ratio limits)

Archives are read in memory; nothing touches the filesystem.
"""

import io
import logging
import zipfile
import zlib
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple

from ..core.config import settings
from ..core.exceptions import IngestionError, NoCsvInArchive

logger = logging.getLogger("kpidash.archive")


# ═══════════════════════════════════════════════════════════════════════════
# Configuration
# ═══════════════════════════════════════════════════════════════════════════

MAX_ARCHIVE_SIZE_MB = settings.MAX_ARCHIVE_SIZE_MB
MAX_EXTRACTED_SIZE_MB = settings.MAX_EXTRACTED_SIZE_MB
MAX_FILES_PER_ARCHIVE = settings.MAX_FILES_PER_ARCHIVE
SUSPICIOUS_COMPRESSION_RATIO = 100

CSV_EXTENSION = ".csv"
ARCHIVE_EXTENSION = ".zip"

CANDIDATE_ENCODINGS = ("utf-8-sig", "utf-8", "latin-1", "cp1252")


# ═══════════════════════════════════════════════════════════════════════════
# Data Classes
# ═══════════════════════════════════════════════════════════════════════════


@dataclass
class DecodedPayload:
    """CSV text recovered from an upload."""
    text: str
    source_name: str  # Uploaded filename
    encoding: str
    member_name: Optional[str] = None  # Set when the text came out of an archive
    size_bytes: int = 0


# ═══════════════════════════════════════════════════════════════════════════
# Archive Handler
# ═══════════════════════════════════════════════════════════════════════════


class ArchiveHandler:
    """
    Decodes uploads and extracts the CSV member of ZIP archives.

    Features:
    - Zip bomb protection (member count and uncompressed size limits)
    - ZIP detection by extension or by magic bytes
    - Encoding detection with BOM handling
    """

    def __init__(
        self,
        max_archive_size_mb: int = MAX_ARCHIVE_SIZE_MB,
        max_extracted_size_mb: int = MAX_EXTRACTED_SIZE_MB,
        max_files: int = MAX_FILES_PER_ARCHIVE,
    ):
        self.max_archive_size_bytes = max_archive_size_mb * 1024 * 1024
        self.max_extracted_size_bytes = max_extracted_size_mb * 1024 * 1024
        self.max_files = max_files

    async def extract_csv_text(self, payload: bytes, filename: str) -> DecodedPayload:
        """
        Recover CSV text from an uploaded payload.

        Args:
            payload: Raw uploaded bytes
            filename: Original filename of the upload

        Returns:
            DecodedPayload with the decoded text

        Raises:
            NoCsvInArchive: The archive holds no .csv member
            IngestionError: Oversized, corrupt or undecodable payload
        """
        logger.info("Decoding upload: %s (%d bytes)", filename, len(payload))

        if len(payload) > self.max_archive_size_bytes:
            raise IngestionError(
                f"Upload too large: {len(payload) / (1024**2):.1f} MB exceeds limit of "
                f"{self.max_archive_size_bytes // (1024**2)} MB",
                source_name=filename,
            )

        if self.is_archive(payload, filename):
            return self._extract_from_zip(payload, filename)

        text, encoding = self.decode_text(payload, filename)
        return DecodedPayload(
            text=text,
            source_name=filename,
            encoding=encoding,
            size_bytes=len(payload),
        )

    @staticmethod
    def is_archive(payload: bytes, filename: str) -> bool:
        if Path(filename or "").suffix.lower() == ARCHIVE_EXTENSION:
            return True
        return zipfile.is_zipfile(io.BytesIO(payload))

    def _extract_from_zip(self, payload: bytes, archive_name: str) -> DecodedPayload:
        """Read the first .csv member of a ZIP archive with safety checks."""
        try:
            with zipfile.ZipFile(io.BytesIO(payload), "r") as zf:
                members = zf.infolist()

                if len(members) > self.max_files:
                    raise IngestionError(
                        f"Too many files in archive: {len(members)} exceeds limit of {self.max_files}",
                        source_name=archive_name,
                    )

                csv_member = next(
                    (
                        info for info in members
                        if not info.is_dir() and info.filename.lower().endswith(CSV_EXTENSION)
                    ),
                    None,
                )
                if csv_member is None:
                    raise NoCsvInArchive(
                        f"No CSV found inside archive {archive_name}",
                        source_name=archive_name,
                    )

                if csv_member.file_size > self.max_extracted_size_bytes:
                    raise IngestionError(
                        f"Extracted size too large: {csv_member.file_size / (1024**2):.1f} MB exceeds limit",
                        source_name=archive_name,
                    )

                # Zip bomb detection: compression ratio > 100:1 is suspicious
                if csv_member.compress_size > 0:
                    compression_ratio = csv_member.file_size / csv_member.compress_size
                    if compression_ratio > SUSPICIOUS_COMPRESSION_RATIO:
                        logger.warning(
                            "Suspicious compression ratio %.1f:1 for %s in %s",
                            compression_ratio, csv_member.filename, archive_name
                        )

                raw = zf.read(csv_member)

        except zipfile.BadZipFile as e:
            raise IngestionError(f"Invalid ZIP file: {e}", source_name=archive_name) from e
        except (zlib.error, NotImplementedError, RuntimeError, EOFError) as e:
            # Corrupt stream, unsupported compression or encrypted member
            raise IngestionError(f"Extraction error: {e}", source_name=archive_name) from e

        logger.info("Found CSV member %s in %s", csv_member.filename, archive_name)

        text, encoding = self.decode_text(raw, archive_name)
        return DecodedPayload(
            text=text,
            source_name=archive_name,
            encoding=encoding,
            member_name=csv_member.filename,
            size_bytes=len(raw),
        )

    def decode_text(self, raw: bytes, source_name: str = "upload") -> Tuple[str, str]:
        """Decode bytes to text; returns (text, encoding)."""
        encoding = self._detect_encoding(raw)
        try:
            text = raw.decode(encoding)
        except UnicodeDecodeError as e:
            raise IngestionError(
                f"Could not decode {source_name} as {encoding}: {e}",
                source_name=source_name,
            ) from e

        if "\x00" in text:
            raise IngestionError(
                f"Payload is not delimited text: {source_name}",
                source_name=source_name,
            )

        logger.debug("Decoded %s as %s", source_name, encoding)
        return text, encoding

    def _detect_encoding(self, sample: bytes) -> str:
        """Detect text encoding from sample bytes."""
        if sample.startswith((b"\xff\xfe", b"\xfe\xff")):
            return "utf-16"
        for encoding in CANDIDATE_ENCODINGS:
            try:
                sample.decode(encoding)
                return encoding
            except (UnicodeDecodeError, LookupError):
                continue
        return "latin-1"


# Global instance
archive_handler = ArchiveHandler()
