import io
from typing import AsyncGenerator, Callable, List, Sequence

import pytest
from httpx import ASGITransport, AsyncClient
from openpyxl import Workbook

from app.main import app


@pytest.fixture()
async def client() -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client bound to the FastAPI app."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.fixture()
def make_xlsx() -> Callable[..., bytes]:
    """Build an .xlsx in memory from a list of rows (header first)."""

    def _make(rows: Sequence[Sequence], sheet_name: str = "Data") -> bytes:
        wb = Workbook()
        ws = wb.active
        ws.title = sheet_name
        for row in rows:
            ws.append(list(row))
        bio = io.BytesIO()
        wb.save(bio)
        return bio.getvalue()

    return _make


@pytest.fixture()
def progress_log() -> List[tuple]:
    return []
