"""
Delimited Text Parser

Reads header-bearing CSV text into raw string cells:
1. Delimiter sniffing (comma, semicolon, tab, pipe)
2. Blank lines skipped
3. Malformed lines kept best-effort and reported as ParseWarnings
   - too many fields: extra fields dropped
   - too few fields: missing cells left empty (None)

Cells are never type-converted here; coercion happens once, in the Dataset.
"""

import csv
import io
import logging
from dataclasses import dataclass, field
from typing import List

import pandas as pd

from ..core.exceptions import IngestionError, ParseWarning

logger = logging.getLogger("kpidash.parser")

SNIFF_SAMPLE_CHARS = 4096
CANDIDATE_DELIMITERS = ",;\t|"
WARNINGS_LOGGED = 5


@dataclass
class ParsedTable:
    """Header names in file order plus one raw-string row per data line."""
    columns: List[str]
    frame: pd.DataFrame
    delimiter: str = ","
    warnings: List[ParseWarning] = field(default_factory=list)


class DelimitedTextParser:
    """Tolerant CSV reader built on pandas' python engine."""

    def parse(self, text: str, source_name: str = "upload") -> ParsedTable:
        """
        Parse CSV text.

        Raises:
            IngestionError: No header row, or text pandas cannot tokenize at all
        """
        if not text or not text.strip():
            raise IngestionError(f"No header row found in {source_name}", source_name=source_name)

        delimiter = self._detect_delimiter(text)
        logger.info("Parsing %s with delimiter=%r", source_name, delimiter)

        warnings: List[ParseWarning] = []

        try:
            field_counts = self._field_counts(text, delimiter)
            n_expected = field_counts[0] if field_counts else 0
            # 0-based data rows wider than the header, in file order
            wide_rows = iter([
                i - 1 for i, n in enumerate(field_counts) if i > 0 and n > n_expected
            ])

            def on_bad_line(fields: List[str]) -> List[str]:
                row = next(wide_rows, None)
                warnings.append(ParseWarning(
                    row=row,
                    code="TooManyFields",
                    message=f"Too many fields in row {row}: expected {n_expected} but parsed {len(fields)}",
                ))
                return fields[:n_expected]

            # header=None so pandas never infers an implicit index or mangles
            # duplicate names; every line wider than the header is a bad line
            frame = pd.read_csv(
                io.StringIO(text),
                sep=delimiter,
                header=None,
                engine="python",
                dtype=str,
                keep_default_na=False,
                skip_blank_lines=True,
                on_bad_lines=on_bad_line,
            )
        except pd.errors.EmptyDataError as e:
            raise IngestionError(f"No header row found in {source_name}", source_name=source_name) from e
        except (pd.errors.ParserError, csv.Error) as e:
            logger.error("Error parsing %s: %s", source_name, e)
            raise IngestionError(f"Could not parse {source_name}: {e}", source_name=source_name) from e

        columns = ["" if pd.isna(c) else str(c) for c in frame.iloc[0]]
        frame = frame.iloc[1:].reset_index(drop=True)
        frame.columns = columns

        # With keep_default_na=False only absent trailing fields come back as NaN
        short_rows = frame.index[frame.isna().any(axis=1)]
        for row in short_rows:
            warnings.append(ParseWarning(
                row=int(row),
                code="TooFewFields",
                message=f"Too few fields in row {int(row)}: missing cells left empty",
            ))

        if warnings:
            logger.warning(
                "%s: %d parse warnings, first: %s",
                source_name, len(warnings),
                "; ".join(w.message for w in warnings[:WARNINGS_LOGGED]),
            )

        logger.info("Parsed %s: %d rows, %d columns", source_name, len(frame), len(columns))

        return ParsedTable(
            columns=columns,
            frame=frame,
            delimiter=delimiter,
            warnings=warnings,
        )

    @staticmethod
    def _field_counts(text: str, delimiter: str) -> List[int]:
        """Fields per record, header first; blank lines skipped the way pandas skips them."""
        reader = csv.reader(io.StringIO(text), delimiter=delimiter)
        return [
            len(record) for record in reader
            if record and not (len(record) == 1 and not record[0].strip())
        ]

    def _detect_delimiter(self, sample: str) -> str:
        """Detect CSV delimiter from sample text."""
        try:
            dialect = csv.Sniffer().sniff(sample[:SNIFF_SAMPLE_CHARS], delimiters=CANDIDATE_DELIMITERS)
            return dialect.delimiter
        except csv.Error:
            return ','


# Global instance
csv_parser = DelimitedTextParser()
