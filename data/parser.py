"""
Reading of reservoir registers exported by county water offices.

Exports rarely start at the header: there is usually a title block
("Kitui County Water Department: Dam Levels, March 2024"), a blank
line, and only then the table. Workbooks may also carry a notes sheet
in front of the register. The reader therefore looks for the header row
itself: the first row whose cells name both a reservoir and a county.
"""

import csv
import io
import re
from pathlib import Path
from typing import Iterable, NamedTuple, Optional, Sequence, Union
import logging

import pandas as pd

from data.cleaner import REQUIRED_COLUMNS, ParseError, normalize_column_name

logger = logging.getLogger(__name__)

HEADER_SCAN_ROWS = 20  # Title blocks longer than this are not expected
CSV_ENCODINGS = ("utf-8-sig", "cp1252", "latin-1")
CSV_SEPARATORS = (",", ";", "\t")
EXCEL_SUFFIXES = (".xlsx", ".xlsm")
LINE_BREAK = re.compile(r"\r\n|\r|\n")


class RegisterFile(NamedTuple):
    """Register table cut at its header row, plus where it was found."""
    frame: pd.DataFrame
    source: str       # e.g. "sheet 'Dams'" or "CSV (utf-8-sig, ';')"
    header_row: int   # 0-based row of the header within the source


def find_header_row(rows: Iterable[Sequence]) -> Optional[int]:
    """
    Index of the first row naming every required column (name, county).

    Only the first HEADER_SCAN_ROWS rows are inspected.
    """
    for index, row in enumerate(rows):
        if index >= HEADER_SCAN_ROWS:
            break
        columns = {normalize_column_name(cell) for cell in row if _filled(cell)}
        if set(REQUIRED_COLUMNS) <= columns:
            return index
    return None


def read_register(file_path: Union[str, Path]) -> RegisterFile:
    """
    Reads a reservoir register (CSV or Excel) starting at its header row.

    Raises:
        ParseError: missing file, unsupported format, or no header row
            with reservoir name and county columns
    """
    path = Path(file_path)

    if not path.exists():
        raise ParseError(f"File not found: {path}")

    suffix = path.suffix.lower()
    if suffix == ".csv":
        register = _read_csv_register(path)
    elif suffix in EXCEL_SUFFIXES:
        register = _read_excel_register(path)
    else:
        raise ParseError(f"Unsupported file format: {suffix}. Supported: CSV, XLSX")

    if register is None:
        raise ParseError(
            f"No register header found in {path.name}: "
            f"expected reservoir name and county columns in the first {HEADER_SCAN_ROWS} rows"
        )

    logger.info(
        f"Register {path.name}: {source_label(register)}, "
        f"{len(register.frame)} data rows"
    )
    return register


def source_label(register: RegisterFile) -> str:
    return f"{register.source}, header on row {register.header_row + 1}"


def _read_csv_register(path: Path) -> Optional[RegisterFile]:
    """Tries each encoding/separator until a header row turns up."""
    raw = path.read_bytes()

    for encoding in CSV_ENCODINGS:
        try:
            text = raw.decode(encoding)
        except UnicodeDecodeError:
            continue

        lines = LINE_BREAK.split(text)
        for sep in CSV_SEPARATORS:
            header_row = find_header_row(csv.reader(lines[:HEADER_SCAN_ROWS], delimiter=sep))
            if header_row is None:
                continue

            frame = pd.read_csv(
                io.StringIO("\n".join(lines[header_row:])),
                sep=sep,
            )
            return RegisterFile(frame, f"CSV ({encoding}, {sep!r})", header_row)

        logger.debug(f"{path.name}: no header row with encoding {encoding}")

    return None


def _read_excel_register(path: Path) -> Optional[RegisterFile]:
    """Takes the first sheet that contains a register header."""
    try:
        sheets = pd.read_excel(path, sheet_name=None, header=None, engine="openpyxl")
    except Exception as e:
        raise ParseError(f"Failed to read Excel file: {e}") from e

    for sheet_name, grid in sheets.items():
        header_row = find_header_row(grid.head(HEADER_SCAN_ROWS).itertuples(index=False))
        if header_row is None:
            logger.debug(f"{path.name}: sheet '{sheet_name}' has no register header")
            continue

        header = [
            str(cell).strip() if _filled(cell) else f"unnamed_{i}"
            for i, cell in enumerate(grid.iloc[header_row])
        ]
        frame = grid.iloc[header_row + 1:].reset_index(drop=True)
        frame.columns = header
        return RegisterFile(frame, f"sheet '{sheet_name}'", header_row)

    return None


def _filled(cell) -> bool:
    if cell is None:
        return False
    if isinstance(cell, str):
        return bool(cell.strip())
    return not pd.isna(cell)
