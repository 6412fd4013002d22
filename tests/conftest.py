from __future__ import annotations

from pathlib import Path

import pytest

from townsite.config import SiteSettings
from townsite.datasette import DatasetteClient

from .fakes import BASE_URL, FakeDatasette


@pytest.fixture
def datasette() -> FakeDatasette:
    return FakeDatasette()


@pytest.fixture
def client(datasette: FakeDatasette) -> DatasetteClient:
    return DatasetteClient(BASE_URL, session=datasette)


@pytest.fixture
def settings(tmp_path: Path) -> SiteSettings:
    return SiteSettings(datasette_url=BASE_URL, content_dir=tmp_path / "content")
