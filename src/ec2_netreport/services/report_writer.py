"""Streaming CSV writer for report rows."""

from typing import TextIO

from ..utils.metrics import CSV_HEADER, ReportRow


class ReportWriter:
    """
    Write the report header and rows to a text stream.

    Each line is flushed as soon as it is written so partial reports survive
    a later failure. Fields are not quoted; a comma inside a Name tag shifts
    the columns of that row.
    """

    def __init__(self, stream: TextIO):
        self.stream = stream
        self.rows_written = 0
        self._header_written = False

    def write_header(self) -> None:
        """Write the header line once; later calls are no-ops."""
        if self._header_written:
            return
        self._write_line(CSV_HEADER)
        self._header_written = True

    def write_row(self, row: ReportRow) -> None:
        self.write_header()
        self._write_line(row.to_csv_line())
        self.rows_written += 1

    def _write_line(self, line: str) -> None:
        self.stream.write(line + "\n")
        self.stream.flush()
