import pytest

from file_favorites.services import FavoriteStore


@pytest.fixture
def store(tmp_path):
    return FavoriteStore.from_data_dir(tmp_path / "data")


@pytest.fixture
def opened():
    """Paths passed to the recording opener, in call order."""
    return []


@pytest.fixture
def opener(opened):
    return opened.append


def make_file(directory, name, content="x"):
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / name
    path.write_text(content)
    return str(path)
