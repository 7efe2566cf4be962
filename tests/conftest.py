import pathlib
import site

import pytest
from dbadapter.recording import RecordingContext, RecordingMode

HERE = pathlib.Path(pathlib.Path(__file__).resolve()).parent
site.addsitedir(HERE)


@pytest.fixture
def recording_dir(tmp_path):
    """Isolated directory for recording files."""
    path = tmp_path / 'recordings'
    path.mkdir()
    return path


@pytest.fixture
def make_recording(request, recording_dir):
    """Factory for recording contexts named after the running test.

    Example usage:
        def test_replay(make_recording):
            writer = make_recording('write')
            reader = make_recording('read')
    """
    def factory(mode=RecordingMode.OFF, names=None):
        names = names or (request.node.module.__name__, request.node.name)
        return RecordingContext(names=tuple(names), mode=mode, directory=recording_dir)

    return factory


pytest_plugins = [
    'tests.fixtures.mocks',
    'tests.fixtures.sqlite',
    'tests.fixtures.postgres',
]
