import pytest
from pyfakefs.fake_filesystem_unittest import Patcher

CONFIG_DIR = '/home/user/.config/flowtee'


@pytest.fixture
def fs():
    with Patcher() as patcher:
        yield patcher.fs


@pytest.fixture
def config_dir(fs, monkeypatch):
    """Empty flowtee config directory on a fake filesystem."""
    monkeypatch.setenv('FLOWTEE_CONFIG_DIR', CONFIG_DIR)
    fs.create_dir(CONFIG_DIR)
    return CONFIG_DIR
