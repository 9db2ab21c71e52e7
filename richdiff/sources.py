# richdiff/richdiff/sources.py
from __future__ import annotations
import csv
import sys
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import BinaryIO, Iterator, List, Optional, Union

from richdiff import logging as slog

Row = List[str]

DELIMITERS = {
    "comma": ",",
    "pipe": "|",
    "tab": "\t",
}


def _max_field_size() -> int:
    # largest value the C long behind csv.field_size_limit accepts
    limit = sys.maxsize
    while True:
        try:
            csv.field_size_limit(limit)
            return limit
        except OverflowError:
            limit //= 2


_FIELD_SIZE_LIMIT = _max_field_size()


def resolve_delimiter(value: str) -> str:
    """Accept a delimiter name (comma/pipe/tab, any case) or a single literal character."""
    if value is None:
        raise ValueError("Delimiter must be given")
    key = str(value).strip().lower()
    if key in DELIMITERS:
        return DELIMITERS[key]
    if len(value) == 1:
        return value
    raise ValueError(f"Unknown delimiter '{value}'. Use one of {sorted(DELIMITERS)} or a single character.")


@dataclass(frozen=True)
class ReadFailure:
    """A record that could not be parsed. Never compared; stops the run."""
    side: str
    path: str
    record: int
    physical_line: Optional[int]
    message: str

    def describe(self) -> str:
        where = f"record {self.record}"
        if self.physical_line is not None:
            where += f" (physical line {self.physical_line})"
        return f"[{self.side}] {self.path}: {where}: {self.message}"


RecordResult = Union[Row, ReadFailure]


class RecordSource(ABC):
    """
    One side of a comparison as a lazy, forward-only sequence of rows.
    Each item is either a Row or a ReadFailure; exhaustion means end of file.
    Implementations are context managers and must release their handle on exit.
    """

    side: str = ""

    @abstractmethod
    def records(self) -> Iterator[RecordResult]:
        ...

    def close(self) -> None:
        pass

    def __iter__(self) -> Iterator[RecordResult]:
        return self.records()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


class CsvRecordSource(RecordSource):
    """
    Delimited-text reader.

    Rows may have any number of fields. Blank lines are skipped by default and
    do not take a record number. Cells have no practical size limit. Quoting
    problems and bytes that do not decode are reported as a ReadFailure at the
    record they occur in, after which the source yields nothing more.

    The file is read as bytes and decoded one physical line at a time, so the
    encoding must keep b"\n" as the line terminator (UTF-8, Latin-1, cp1252...).
    """

    def __init__(
        self,
        path: str,
        *,
        side: str,
        delimiter: str = ",",
        encoding: str = "utf-8",
        skip_blank_lines: bool = True,
    ):
        self.path = str(path)
        self.side = side
        self.delimiter = resolve_delimiter(delimiter)
        self.encoding = encoding
        self.skip_blank_lines = skip_blank_lines
        self._handle: Optional[BinaryIO] = None
        self._physical_line = 0

    def open(self) -> "CsvRecordSource":
        if self._handle is None:
            slog.log_debug(f"Opening {self.side} file {self.path} (delimiter={self.delimiter!r}, encoding={self.encoding})")
            self._handle = open(self.path, "rb")
        return self

    def close(self) -> None:
        if self._handle is not None:
            self._handle.close()
            self._handle = None

    def __enter__(self) -> "CsvRecordSource":
        return self.open()

    def _failure(self, record: int, physical_line: Optional[int], err: Exception) -> ReadFailure:
        return ReadFailure(
            side=self.side,
            path=self.path,
            record=record,
            physical_line=physical_line,
            message=f"{type(err).__name__}: {err}",
        )

    def _decoded_lines(self) -> Iterator[str]:
        for raw in self._handle:
            self._physical_line += 1
            yield raw.decode(self.encoding)

    def records(self) -> Iterator[RecordResult]:
        self.open()
        csv.field_size_limit(_FIELD_SIZE_LIMIT)
        self._physical_line = 0
        reader = csv.reader(self._decoded_lines(), delimiter=self.delimiter, strict=True)
        record = 0
        while True:
            try:
                row = next(reader)
            except StopIteration:
                return
            except (csv.Error, UnicodeDecodeError) as e:
                record += 1
                yield self._failure(record, self._physical_line or None, e)
                return

            if self.skip_blank_lines and not row:
                continue
            record += 1
            yield row
