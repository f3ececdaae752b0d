"""
app/parsing/tabular_decoder.py

Lazy decoder for delimited byte streams.

The first row is the header. Every following non-blank row becomes one
``RawRecord``. Column-count mismatches never fail the stream:

    - short rows simply lack the trailing keys
    - long rows keep their surplus cells under ``_extra_1``, ``_extra_2``, ...

Only unreadable input (I/O errors, undecodable bytes, malformed quoting the
csv module refuses) raises ``DecodeError``.
"""

from __future__ import annotations

import csv
import io
from collections.abc import Iterator, Sequence
from typing import BinaryIO

from app.domain.cancellation import CancellationToken
from app.domain.errors import DecodeError
from app.domain.ingestion import RawRecord

EXTRA_CELL_PREFIX = "_extra_"
UNNAMED_COLUMN_PREFIX = "_column_"


class TabularDecoder:
    """
    Turns a delimited byte stream into an ordered sequence of RawRecord.
    """

    def __init__(
        self,
        *,
        delimiter: str = ",",
        quotechar: str = '"',
        encoding: str = "utf-8-sig",
        trim_values: bool = True,
    ) -> None:
        self._delimiter = delimiter
        self._quotechar = quotechar
        self._encoding = encoding
        self._trim_values = trim_values

    def decode(
        self,
        stream: BinaryIO,
        *,
        cancel_token: CancellationToken | None = None,
    ) -> Iterator[RawRecord]:
        """
        Yield one RawRecord per non-blank data row, in input order.

        The underlying binary stream is left open; the caller owns it.
        """

        text_stream: io.TextIOWrapper | None = None
        try:
            text_stream = io.TextIOWrapper(stream, encoding=self._encoding, newline="")
            reader = csv.reader(
                text_stream,
                delimiter=self._delimiter,
                quotechar=self._quotechar,
            )

            header = next(reader, None)
            if header is None:
                return
            columns = self._header_columns(header)
            if not any(not name.startswith(UNNAMED_COLUMN_PREFIX) for name in columns):
                return

            for cells in reader:
                if cancel_token is not None:
                    cancel_token.raise_if_cancelled()
                if self._is_blank_row(cells):
                    continue
                yield RawRecord(
                    row_number=reader.line_num,
                    values=self._row_values(columns, cells),
                )

        except UnicodeDecodeError as exc:
            raise DecodeError(f"Input must be {self._encoding_label()} encoded.") from exc
        except csv.Error as exc:
            raise DecodeError(f"Unreadable delimited input: {exc}") from exc
        except OSError as exc:
            raise DecodeError("Failed to read tabular input stream.") from exc
        finally:
            if text_stream is not None:
                try:
                    text_stream.detach()
                except ValueError:
                    pass

    def _header_columns(self, header: Sequence[str]) -> list[str]:
        columns: list[str] = []
        for index, raw_name in enumerate(header, start=1):
            name = raw_name.strip()
            columns.append(name if name else f"{UNNAMED_COLUMN_PREFIX}{index}")
        return columns

    def _row_values(self, columns: Sequence[str], cells: Sequence[str]) -> dict[str, str]:
        values: dict[str, str] = {}
        for index, cell in enumerate(cells):
            if index < len(columns):
                key = columns[index]
            else:
                key = f"{EXTRA_CELL_PREFIX}{index - len(columns) + 1}"
            values[key] = cell.strip() if self._trim_values else cell
        return values

    def _encoding_label(self) -> str:
        return "UTF-8" if self._encoding.lower().startswith("utf-8") else self._encoding

    @staticmethod
    def _is_blank_row(cells: Sequence[str]) -> bool:
        return all(cell.strip() == "" for cell in cells)
