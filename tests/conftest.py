"""
Pytest Configuration and Fixtures
==================================
Shared fixtures: in-memory workbooks and a Flask test client.
"""

import io
import os
import sys

import pytest
import xlwt
from openpyxl import Workbook as XlsxWorkbook

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app import create_app  # noqa: E402
from workbook import Sheet, Workbook  # noqa: E402


def build_xlsx(sheets):
    """Write {sheet name: list of rows} to .xlsx bytes with openpyxl."""
    wb = XlsxWorkbook()
    wb.remove(wb.active)
    for name, rows in sheets.items():
        ws = wb.create_sheet(title=name)
        for r, row in enumerate(rows, start=1):
            for c, value in enumerate(row, start=1):
                if value is not None:
                    ws.cell(row=r, column=c, value=value)
    buffer = io.BytesIO()
    wb.save(buffer)
    return buffer.getvalue()


def build_xls(sheets):
    """Write {sheet name: list of rows} to legacy .xls bytes with xlwt."""
    wb = xlwt.Workbook(encoding='utf-8')
    for name, rows in sheets.items():
        ws = wb.add_sheet(name)
        for r, row in enumerate(rows):
            for c, value in enumerate(row):
                if value is not None:
                    ws.write(r, c, value)
    buffer = io.BytesIO()
    wb.save(buffer)
    return buffer.getvalue()


# =============================================================================
# WORKBOOK FIXTURES
# =============================================================================

@pytest.fixture
def xlsx_bytes():
    """Factory for .xlsx payloads."""
    return build_xlsx


@pytest.fixture
def xls_bytes():
    """Factory for legacy .xls payloads."""
    return build_xls


@pytest.fixture
def sample_sheets():
    return {
        "Sheet1": [[" x "], ["y"], ["x"]],
        "Sheet2": [["x"], ["z"]],
    }


@pytest.fixture
def sample_workbook(sample_sheets):
    """Workbook built directly, without going through a file."""
    return Workbook([Sheet.from_rows(name, rows) for name, rows in sample_sheets.items()])


# =============================================================================
# APP FIXTURES
# =============================================================================

@pytest.fixture
def app():
    return create_app({"TESTING": True, "SECRET_KEY": "test"})


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def workspace(app):
    return app.extensions["workspace"]


@pytest.fixture
def upload(client, xlsx_bytes):
    """POST a workbook to /upload."""
    def _upload(sheets=None, data=None, filename="book.xlsx"):
        payload = data if data is not None else xlsx_bytes(sheets)
        return client.post(
            "/upload",
            data={"file": (io.BytesIO(payload), filename)},
            content_type="multipart/form-data",
        )
    return _upload
