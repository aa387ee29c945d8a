from __future__ import annotations

from pathlib import Path

import pytest

from tests._fixtures.site_builder import SiteFixture


@pytest.fixture
def site(tmp_path: Path) -> SiteFixture:
    """Provide an input/output tree pair rooted at the pytest tmp_path."""
    return SiteFixture(tmp_path)
