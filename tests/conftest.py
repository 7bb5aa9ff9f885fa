"""Shared pytest fixtures for all tests."""

import plistlib
import zipfile

import pytest

from cli.config import Config
from filestore.file_store import LocalFileStore


SAMPLE_INFO = {
    'CFBundleIdentifier': 'com.example.demo',
    'CFBundleShortVersionString': '1.2.0',
    'CFBundleVersion': '42',
    'CFBundleDisplayName': 'Démo',
}


def build_ipa(path, entries):
    """
    Write a zip archive with the given members.

    Args:
        path: Destination archive path
        entries: Mapping of member name to bytes (None for a directory entry)

    Returns:
        The archive path
    """
    with zipfile.ZipFile(path, 'w') as zf:
        for name, data in entries.items():
            if data is None:
                zf.writestr(name if name.endswith('/') else name + '/', b'')
            else:
                zf.writestr(name, data)
    return path


@pytest.fixture
def sample_info():
    """
    Info.plist contents of the sample package.

    Returns:
        Dictionary in the order it is written to the plist
    """
    return dict(SAMPLE_INFO)


@pytest.fixture
def ipa_builder():
    """
    Provide the archive builder to tests that need custom layouts.

    Returns:
        build_ipa function
    """
    return build_ipa


@pytest.fixture
def store_root(tmp_path):
    """
    Create temporary store root directory.

    Returns:
        Path to the store root
    """
    root = tmp_path / 'store'
    root.mkdir()
    return root


@pytest.fixture
def inbox(tmp_path):
    """
    Create temporary inbox directory, distinct from the store root.

    Returns:
        Path to the inbox
    """
    path = tmp_path / 'inbox'
    path.mkdir()
    return path


@pytest.fixture
def store(store_root, inbox):
    """
    Create store over the temporary root and inbox.

    Returns:
        LocalFileStore instance
    """
    return LocalFileStore(store_root, inbox)


@pytest.fixture
def sample_ipa(store_root):
    """
    Create a well-formed package in the store.

    Returns:
        Path to Demo.ipa
    """
    return build_ipa(store_root / 'Demo.ipa', {
        'Payload/': None,
        'Payload/Demo.app/': None,
        'Payload/Demo.app/Info.plist': plistlib.dumps(SAMPLE_INFO),
        'Payload/Demo.app/Demo': b'\x00binary',
    })


@pytest.fixture
def temp_config(tmp_path, store_root, inbox):
    """
    Create temporary config instance pointing at the temporary store.

    Returns:
        Config instance with temp config file
    """
    config = Config(tmp_path / '.ipadrop' / 'config.json')
    config.data['store_path'] = str(store_root)
    config.data['inbox_path'] = str(inbox)
    config.data['server_port'] = 0
    config.save()
    return config
