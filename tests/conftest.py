import pytest

from nsmover.mover import NamespaceMover
from nsmover.paths import normalize_path


@pytest.fixture
def src(tmp_path):
    root = tmp_path / "src"
    root.mkdir()
    return root


@pytest.fixture
def write_source():
    def write(path, text):
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
        return path

    return write


@pytest.fixture
def mover(src):
    return NamespaceMover([src])


@pytest.fixture
def norm():
    return normalize_path
