"""Spreadsheet and delimited-text loader backed by pandas."""

from __future__ import annotations

import csv
import zipfile
from pathlib import Path
from typing import List

import pandas as pd
from openpyxl.utils.exceptions import InvalidFileException

from valibook.connectors.base import BaseLoader
from valibook.errors import LoadError

EXCEL_SUFFIXES = {".xlsx", ".xlsm", ".xls"}
DELIMITED_SUFFIXES = {".csv": ",", ".tsv": "\t", ".txt": ","}


class TabularLoader(BaseLoader):
    """Load the first sheet of a spreadsheet or a delimited text file.

    Every cell is returned as a string; blank cells become ``""``.

    Example:
        >>> loader = TabularLoader()
        >>> rows = loader.load("./data/uploads/customers.xlsx")
        >>> headers, data = rows[0], rows[1:]
    """

    def __init__(self, encoding: str = "utf-8", **pandas_kwargs):
        """Initialize tabular loader.

        Args:
            encoding: Text encoding of delimited files
            **pandas_kwargs: Additional arguments passed to pandas readers
        """
        super().__init__(encoding=encoding, **pandas_kwargs)
        self.encoding = encoding
        self.pandas_kwargs = pandas_kwargs

    def load(self, location: str | Path) -> List[List[str]]:
        path = Path(location)

        if not path.exists():
            raise LoadError(str(path), "file not found")
        if not path.is_file():
            raise LoadError(str(path), "not a file")
        if path.stat().st_size == 0:
            raise LoadError(str(path), "file is empty")

        suffix = path.suffix.lower()
        self.logger.debug(f"Loading {path.name}")

        if suffix in EXCEL_SUFFIXES:
            df = self._read_excel(path)
        else:
            df = self._read_delimited(path, DELIMITED_SUFFIXES.get(suffix, ","))

        if df.empty:
            raise LoadError(str(path), "file is empty")

        rows = df.fillna("").astype(str).values.tolist()
        self.logger.debug(f"  Loaded {len(rows) - 1} data rows from {path.name}")
        return rows

    def _read_excel(self, path: Path) -> pd.DataFrame:
        try:
            sheets = pd.read_excel(
                path,
                sheet_name=None,
                header=None,
                dtype=str,
                keep_default_na=False,
                **self.pandas_kwargs,
            )
        except (ValueError, KeyError, zipfile.BadZipFile, InvalidFileException) as e:
            # Not a workbook, or a zip without the workbook parts
            raise LoadError(str(path), f"no parseable sheet ({e})") from e
        except OSError as e:
            raise LoadError(str(path), str(e)) from e

        if not sheets:
            raise LoadError(str(path), "no parseable sheet")

        # First sheet only
        return next(iter(sheets.values()))

    def _field_count(self, path: Path, separator: str) -> int:
        """Widest row of a delimited file."""
        with open(path, "r", encoding=self.encoding, newline="") as f:
            return max((len(row) for row in csv.reader(f, delimiter=separator)), default=0)

    def _read_delimited(self, path: Path, separator: str) -> pd.DataFrame:
        try:
            # Ragged rows are padded to the widest row instead of rejected
            width = self._field_count(path, separator)
            if width == 0:
                raise LoadError(str(path), "file is empty")
            return pd.read_csv(
                path,
                sep=separator,
                header=None,
                names=list(range(width)),
                dtype=str,
                keep_default_na=False,
                encoding=self.encoding,
                skip_blank_lines=True,
                **self.pandas_kwargs,
            )
        except pd.errors.EmptyDataError as e:
            raise LoadError(str(path), "file is empty") from e
        except (pd.errors.ParserError, csv.Error, UnicodeDecodeError) as e:
            raise LoadError(str(path), f"cannot parse file ({e})") from e
