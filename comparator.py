import logging
from dataclasses import dataclass, field
from typing import List, Optional

from column_letters import decode_column_letter
from errors import ComparisonError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ColumnSelection:
    sheet: str
    column: str

    def is_complete(self) -> bool:
        return bool(self.sheet) and bool(self.column)

    def label(self) -> str:
        return f"{self.sheet} - Column {self.column}"


@dataclass
class ComparisonResult:
    first: ColumnSelection
    second: ColumnSelection
    only_in_first: List[str] = field(default_factory=list)
    only_in_second: List[str] = field(default_factory=list)
    first_count: int = 0
    second_count: int = 0

    def counts_text(self) -> str:
        return (f"Found {self.first_count} values in first column and "
                f"{self.second_count} values in second column")

    def summary(self) -> str:
        return (f"Comparison complete. Found {len(self.only_in_first)} unique to first column "
                f"and {len(self.only_in_second)} unique to second column")

    @property
    def has_differences(self) -> bool:
        return bool(self.only_in_first or self.only_in_second)


def normalize_value(value) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, bool):
        # spreadsheet text for booleans is lower case
        return "true" if value else "false"
    return str(value).strip()


def column_values(sheet, column_index: int) -> List[str]:
    """Trimmed string values of one column (0-based), deduplicated in first-seen order.

    Only rows inside the sheet's bounding range are scanned; a column past
    the populated range simply has no values.
    """
    bounds = sheet.bounding_range()
    if bounds is None:
        return []
    min_row, _, max_row, _ = bounds

    seen = {}
    for row in range(min_row, max_row + 1):
        value = normalize_value(sheet.cell(row, column_index))
        if value is not None:
            seen.setdefault(value, None)
    return list(seen)


def _column_index(selection, side):
    try:
        return decode_column_letter(selection.column) - 1
    except ValueError as e:
        raise ComparisonError(f"Invalid {side} column {selection.column!r}: {e}",
                              code="INVALID_COLUMN",
                              details={"side": side, "column": selection.column}) from e


def compare_columns(workbook, first: ColumnSelection, second: ColumnSelection) -> ComparisonResult:
    """Values present in one selected column but not in the other."""
    if workbook is None:
        raise ComparisonError("No workbook found. Please upload a file first.",
                              code="NO_WORKBOOK")

    sheet1 = workbook.get_sheet(first.sheet)
    sheet2 = workbook.get_sheet(second.sheet)
    missing = []
    if sheet1 is None:
        missing.append(f"first sheet '{first.sheet}'")
    if sheet2 is None:
        missing.append(f"second sheet '{second.sheet}'")
    if missing:
        raise ComparisonError(f"Could not find {' and '.join(missing)}",
                              code="SHEET_NOT_FOUND",
                              details={"first": first.sheet if sheet1 is None else None,
                                       "second": second.sheet if sheet2 is None else None})

    col1 = _column_index(first, "first")
    col2 = _column_index(second, "second")

    values1 = column_values(sheet1, col1)
    values2 = column_values(sheet2, col2)
    set1 = set(values1)
    set2 = set(values2)

    result = ComparisonResult(
        first=first,
        second=second,
        only_in_first=[v for v in values1 if v not in set2],
        only_in_second=[v for v in values2 if v not in set1],
        first_count=len(set1),
        second_count=len(set2),
    )
    logger.info(f"{first.label()} vs {second.label()}: {result.counts_text()}; "
                f"{len(result.only_in_first)} only in first, {len(result.only_in_second)} only in second")
    return result
