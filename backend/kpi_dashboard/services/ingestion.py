"""
Ingestion Service

Upload → text → parsed table → sanitized Dataset. The only part of the
engine that can fail; a failure leaves no partial dataset behind.
"""

import logging
import re
from typing import List, Optional

from ..core.config import settings
from ..models.dataset import Dataset
from .archive_handler import ArchiveHandler, archive_handler
from .csv_parser import DelimitedTextParser, ParsedTable, csv_parser

logger = logging.getLogger("kpidash.ingestion")

_WHITESPACE_RUN = re.compile(r'\s+')
_STRIPPED_CHARS = re.compile(r'[/%()]')


def sanitize_column_name(name, max_length: Optional[int] = None) -> str:
    """Trim, whitespace runs → '_', drop / % ( ), cap length."""
    if max_length is None:
        max_length = settings.MAX_COLUMN_NAME_LENGTH
    text = str(name if name is not None else "").strip()
    text = _WHITESPACE_RUN.sub("_", text)
    text = _STRIPPED_CHARS.sub("", text)
    return text[:max_length]


def sanitize_columns(names: List[str], max_length: Optional[int] = None) -> List[str]:
    """Sanitize every header; later duplicates get _2, _3, ... suffixes."""
    sanitized: List[str] = []
    seen = set()
    for name in names:
        base = sanitize_column_name(name, max_length)
        candidate = base
        suffix = 2
        while candidate in seen:
            candidate = f"{base}_{suffix}"
            suffix += 1
        seen.add(candidate)
        sanitized.append(candidate)
    return sanitized


def build_dataset(table: ParsedTable, source_name: str) -> Dataset:
    """Rename parsed columns to their sanitized keys and wrap as a Dataset."""
    columns = sanitize_columns(table.columns)
    frame = table.frame.copy()
    frame.columns = columns
    return Dataset(
        columns=columns,
        frame=frame,
        source_name=source_name,
        warnings=list(table.warnings),
    )


class IngestionService:
    """Combines the archive handler and the CSV parser."""

    def __init__(
        self,
        handler: Optional[ArchiveHandler] = None,
        parser: Optional[DelimitedTextParser] = None,
    ):
        self.handler = handler or archive_handler
        self.parser = parser or csv_parser

    async def ingest(self, payload: bytes, filename: str) -> Dataset:
        """
        Build a Dataset from an uploaded CSV or ZIP payload.

        Raises:
            IngestionError: Payload could not be turned into a dataset
        """
        decoded = await self.handler.extract_csv_text(payload, filename)
        source_name = decoded.member_name or decoded.source_name
        return self.load_text(decoded.text, source_name)

    def load_text(self, text: str, source_name: str = "upload") -> Dataset:
        """Build a Dataset from already-decoded CSV text."""
        table = self.parser.parse(text, source_name)
        dataset = build_dataset(table, source_name)
        logger.info(
            "Ingested %s: %d rows, %d columns, %d warnings",
            source_name, len(dataset), len(dataset.columns), len(dataset.warnings)
        )
        return dataset


# Global instance
ingestion_service = IngestionService()
