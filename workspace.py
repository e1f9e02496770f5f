"""The state behind the form: current workbook, selections, last result, status line."""

import logging
import threading

from column_letters import column_options
from comparator import ColumnSelection, compare_columns
from errors import ComparisonError

logger = logging.getLogger(__name__)

FIRST = "first"
SECOND = "second"


class Workspace:
    """Owns the loaded workbook and everything derived from it.

    Loads are numbered: `begin_load` hands out a token and only the most
    recent token may install its workbook, so a slow parse that finishes
    after a newer upload is dropped instead of winning the race.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._load_version = 0
        self.workbook = None
        self.sheets = []
        self.column_counts = {}
        self.selections = {FIRST: ColumnSelection("", ""), SECOND: ColumnSelection("", "")}
        self.result = None
        self.status = ""

    # -- loading -----------------------------------------------------------

    def begin_load(self):
        with self._lock:
            self._load_version += 1
            return self._load_version

    def is_current(self, token):
        return token == self._load_version

    def finish_load(self, token, workbook):
        with self._lock:
            if not self.is_current(token):
                logger.warning(f"Discarding stale load #{token} (latest is #{self._load_version})")
                return False
            self.workbook = workbook
            self.sheets = workbook.sheet_names
            self.column_counts = workbook.column_counts()
            self._reset_selections()
            self.status = "File loaded successfully. Sheets found: " + ", ".join(self.sheets)
            return True

    def fail_load(self, token, error):
        with self._lock:
            if not self.is_current(token):
                logger.warning(f"Ignoring failure of stale load #{token}: {error}")
                return False
            self.status = f"Error loading file: {error}"
            return True

    def _reset_selections(self):
        self.selections = {FIRST: ColumnSelection("", ""), SECOND: ColumnSelection("", "")}
        self.result = None

    # -- selections ----------------------------------------------------------

    def select(self, side, sheet=None, column=None, reset_column_on_sheet_change=False):
        """Update one side's selection; None keeps the current value.

        A new sheet without a column clears the column. With
        `reset_column_on_sheet_change` the column is cleared even when one
        is given, which is what the form posts after a sheet dropdown change.
        """
        with self._lock:
            current = self.selections[side]
            new_sheet = current.sheet if sheet is None else sheet
            sheet_changed = new_sheet != current.sheet
            if column is None or (sheet_changed and reset_column_on_sheet_change):
                new_column = "" if sheet_changed else current.column
            else:
                new_column = column
            self.selections[side] = ColumnSelection(new_sheet, new_column)

    def column_options(self, sheet_name):
        return column_options(self.column_counts.get(sheet_name, 0))

    @property
    def first(self):
        return self.selections[FIRST]

    @property
    def second(self):
        return self.selections[SECOND]

    def ready(self):
        return self.first.is_complete() and self.second.is_complete()

    # -- comparing ------------------------------------------------------------

    def compare(self):
        """Run the comparison on the current selections.

        On failure the status line reports the error and the previous
        result stays as it was.
        """
        with self._lock:
            if not self.ready():
                self.status = "Select both sheets and columns before comparing."
                return None
            try:
                result = compare_columns(self.workbook, self.first, self.second)
            except ComparisonError as e:
                logger.warning(f"Comparison failed ({e.code}): {e}")
                self.status = f"Error during comparison: {e}"
                return None
            self.result = result
            self.status = result.summary()
            return result
