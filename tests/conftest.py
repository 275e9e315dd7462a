from __future__ import annotations

import sys
from pathlib import Path
from typing import Dict, List

import pytest

BASE_DIR = Path(__file__).resolve().parent.parent
SRC_DIR = (BASE_DIR / "src").resolve()

if str(BASE_DIR) not in sys.path:
    sys.path.append(str(BASE_DIR))
if str(SRC_DIR) not in sys.path:
    sys.path.append(str(SRC_DIR))

SAMPLE_PROGRAM = (
    "` squares and sums\n"
    "square : x ? x * x\n"
    "total : xs ?\n"
    "\tsquared : map square xs\n"
    "\tfold [+] 0 squared\n"
    "#total\n"
)


@pytest.fixture
def sample_program() -> str:
    """A small multi-line program with a comment, a block and an export."""
    return SAMPLE_PROGRAM


@pytest.fixture
def sample_file(tmp_path: Path) -> Path:
    path = tmp_path / "sample.sn"
    path.write_text(SAMPLE_PROGRAM, encoding="utf-8")
    return path


def pytest_collection_modifyitems(
    session: pytest.Session,
    config: pytest.Config,
    items: List[pytest.Item],
) -> None:
    """Fail fast if a parametrized table ever repeats a case id."""
    del session
    del config

    seen: Dict[str, int] = {}
    duplicates: List[str] = []
    for item in items:
        nodeid = item.nodeid
        if nodeid in seen:
            duplicates.append(nodeid)
            continue
        seen[nodeid] = 1

    if not duplicates:
        return

    lines = "\n".join(f"- {nodeid}" for nodeid in sorted(set(duplicates)))
    raise pytest.UsageError(
        "Duplicate pytest nodeids detected during collection:\n" f"{lines}"
    )
