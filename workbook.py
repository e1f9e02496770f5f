import io
import logging
import os

import pandas as pd

from errors import LoadError

logger = logging.getLogger(__name__)

SUPPORTED_EXTENSIONS = ('.xlsx', '.xlsm', '.xls')


def _cell_value(value):
    # The reader fills gaps with "" (keep_default_na=False) or NaN
    if isinstance(value, str):
        return value if value != "" else None
    if value is None or pd.isna(value):
        return None
    return value


class Sheet:
    """A named grid of cells stored sparsely by 0-based (row, column)."""

    def __init__(self, name, cells=None):
        self.name = name
        self.cells = {}
        for (row, col), value in (cells or {}).items():
            value = _cell_value(value)
            if value is not None:
                self.cells[(row, col)] = value

    @classmethod
    def from_rows(cls, name, rows):
        cells = {}
        for r, row in enumerate(rows):
            for c, value in enumerate(row):
                cells[(r, c)] = value
        return cls(name, cells)

    def cell(self, row, col):
        return self.cells.get((row, col))

    def bounding_range(self):
        """(min_row, min_col, max_row, max_col) of populated cells, or None."""
        if not self.cells:
            return None
        rows = [r for r, _ in self.cells]
        cols = [c for _, c in self.cells]
        return min(rows), min(cols), max(rows), max(cols)

    @property
    def column_count(self):
        bounds = self.bounding_range()
        if bounds is None:
            return 0
        return bounds[3] + 1

    def __repr__(self):
        return f"Sheet({self.name!r}, cells={len(self.cells)})"


class Workbook:
    """Ordered collection of sheets decoded from one uploaded file."""

    def __init__(self, sheets, filename=None):
        self.sheets = {sheet.name: sheet for sheet in sheets}
        self.filename = filename

    @property
    def sheet_names(self):
        return list(self.sheets)

    def get_sheet(self, name):
        return self.sheets.get(name)

    def column_counts(self):
        return {name: sheet.column_count for name, sheet in self.sheets.items()}

    def __contains__(self, name):
        return name in self.sheets


def load_workbook(data, filename=None):
    """Decode spreadsheet bytes into a Workbook.

    pandas picks the engine from the content (openpyxl for xlsx/xlsm, xlrd
    for legacy xls). Every sheet is read as a raw grid: no header row, no
    dtype inference and no NA coercion, so "NA" or "null" stay values.
    Raises LoadError; nothing is returned on failure.
    """
    label = filename or "<upload>"
    if not data:
        raise LoadError("The uploaded file is empty.", code="EMPTY_FILE",
                        details={"filename": filename})

    if filename:
        ext = os.path.splitext(filename)[1].lower()
        if ext and ext not in SUPPORTED_EXTENSIONS:
            raise LoadError(
                f"Unsupported file format '{ext}'. Upload an .xlsx, .xlsm or .xls file.",
                code="UNSUPPORTED_FORMAT",
                details={"filename": filename},
            )

    try:
        frames = pd.read_excel(
            io.BytesIO(data),
            sheet_name=None,
            header=None,
            dtype=object,
            keep_default_na=False,
        )
    except Exception as e:
        logger.error(f"Failed to read workbook {label}: {e}")
        raise LoadError(str(e) or type(e).__name__, code="LOAD_ERROR",
                        details={"filename": filename}) from e

    sheets = [Sheet.from_rows(str(name), frame.to_numpy(dtype=object).tolist())
              for name, frame in frames.items()]
    if not sheets:
        raise LoadError("The workbook contains no sheets.", code="LOAD_ERROR",
                        details={"filename": filename})

    workbook = Workbook(sheets, filename=filename)
    logger.info(f"Loaded workbook {label}: {', '.join(workbook.sheet_names)}")
    return workbook
