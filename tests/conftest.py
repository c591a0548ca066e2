# =============================================================================
# tests/conftest.py - Pytest Configuration
# =============================================================================
# This module provides pytest fixtures and configuration for all tests.
#
# Key features:
# - Sets up environment variables before any imports
# - Provides factories for temporary CSV trees
# =============================================================================

import os

# =============================================================================
# Set up test environment BEFORE any imports
# =============================================================================
# This must happen before importing app.config which loads settings immediately

os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("INFERENCE_SAMPLE_SIZE", "1000")

from pathlib import Path
from typing import Callable

import pytest

from core.models import DiscoverySettings


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def write_csv(tmp_path) -> Callable[..., Path]:
    """
    Factory that writes a CSV file under tmp_path.

    Usage:
        path = write_csv("people/a.csv", "id,name\\n1,Ann\\n")
    """

    def _write(relative: str, content: str | bytes) -> Path:
        path = tmp_path / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, bytes):
            path.write_bytes(content)
        else:
            path.write_text(content, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def people_dir(tmp_path, write_csv) -> Path:
    """Two files with the same header: three people in total."""
    write_csv("people/a.csv", "id,name\n1,Ann\n2,Bob\n")
    write_csv("people/b.csv", "id,name\n3,Cy\n")
    return tmp_path / "people"


@pytest.fixture
def mixed_tree(tmp_path, write_csv) -> Path:
    """
    Several directories with two distinct headers plus junk files.

    data/
      sales/sales_2019.csv    date,amount,paid
      sales/sales_2020.csv    date,amount,paid
      customers/list.csv      id,email,active
      customers/empty.csv     (zero bytes)
      notes/readme.txt        (not matched by *.csv)
    """
    write_csv(
        "data/sales/sales_2019.csv",
        "date,amount,paid\n2019-01-05,10.50,true\n2019-02-11,7,false\n",
    )
    write_csv(
        "data/sales/sales_2020.csv",
        "date,amount,paid\n2020-03-01,3.25,yes\n",
    )
    write_csv(
        "data/customers/list.csv",
        "id,email,active\n1,ann@example.com,Y\n2,bob@example.com,N\n",
    )
    write_csv("data/customers/empty.csv", "")
    write_csv("data/notes/readme.txt", "not a csv\n")
    return tmp_path / "data"


@pytest.fixture
def people_settings(people_dir) -> DiscoverySettings:
    return DiscoverySettings(file_glob=str(people_dir / "*.csv"))
