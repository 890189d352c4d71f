"""Shared test fixtures for daybook."""

import os
import tempfile

import pytest

from daybook.core.storage import MemoryStorage
from daybook.journal import EntryStore


@pytest.fixture
def tmp_dir():
    """Provide a temporary directory that is cleaned up after the test."""
    with tempfile.TemporaryDirectory() as d:
        yield d


@pytest.fixture
def tmp_config_file(tmp_dir):
    """Create a temporary YAML config file."""
    import yaml

    config_data = {
        "paths": {"data_dir": os.path.join(tmp_dir, "data")},
        "storage": {"backend": "memory"},
        "backup": {"default_strategy": "merge", "indent": 4},
    }
    config_path = os.path.join(tmp_dir, "config.yaml")
    with open(config_path, "w") as f:
        yaml.dump(config_data, f)
    return config_path


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    """Keep DAYBOOK_* variables from the host out of config tests."""
    for key in list(os.environ):
        if key.startswith("DAYBOOK_"):
            monkeypatch.delenv(key)


@pytest.fixture
def memory_store():
    return EntryStore(MemoryStorage())


@pytest.fixture
def png_bytes():
    """PNG signature plus filler; enough for media type sniffing."""
    return b"\x89PNG\r\n\x1a\n" + b"\x00\x00\x00\rIHDR" + bytes(range(256))


@pytest.fixture
def gif_bytes():
    return b"GIF89a" + bytes(range(16))
