"""Shared test fixtures for daybook."""

import base64
import os
import tempfile

import pytest

from daybook.core.storage import MemorySlotStorage
from daybook.journal import Journal, PersistenceGateway, RecordStore


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
        "storage": {"backend": "memory", "quota_bytes": 1024 * 1024},
        "view": {"page_size": 5},
    }
    config_path = os.path.join(tmp_dir, "config.yaml")
    with open(config_path, "w") as f:
        yaml.dump(config_data, f)
    return config_path


@pytest.fixture
def slots():
    return MemorySlotStorage()


@pytest.fixture
def gateway(slots):
    return PersistenceGateway(slots)


@pytest.fixture
def store(gateway):
    return RecordStore.open(gateway)


@pytest.fixture
def journal(slots):
    return Journal.open(slots)


def _image(size: int = 16, mime: str = "image/png", name: str = "pic.png", declared: bool = True) -> dict:
    """An image attachment declaring *size* bytes. The payload itself stays small."""
    payload = base64.b64encode(b"\x89" * min(size, 64)).decode("ascii")
    attachment = {"name": name, "type": mime, "dataUrl": f"data:{mime};base64,{payload}"}
    if declared:
        attachment["size"] = size
    return attachment


@pytest.fixture
def make_image():
    """Factory for inline image attachments of a given declared size."""
    return _image
