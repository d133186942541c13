import sys
from pathlib import Path

import pytest


def pytest_configure() -> None:
    project_root = Path(__file__).resolve().parents[1]
    sys.path.insert(0, str(project_root))


@pytest.fixture(autouse=True)
def _clean_bfvm_env(monkeypatch):
    for name in ("BFVM_CELL_WIDTH", "BFVM_MAX_CELLS", "BFVM_STEP_LIMIT", "BFVM_EOF"):
        monkeypatch.delenv(name, raising=False)
