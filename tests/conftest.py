#!/usr/bin/env python3
"""
Pytest configuration for BIG-IP component tests.

This file contains shared fixtures and configurations for unit tests.
"""

import os
import sys
import pytest
import logging
from unittest.mock import MagicMock

# Add project root to path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '../')))

from bigip_framework.bigip_client import BigIP, Folder


def make_fake_bigip(folders=None):
    """
    Build a mock BigIP client backed by a dict of folders.

    The returned mock records every call, while add/get/modify/delete behave
    like the device: get returns None for unknown names.

    Args:
        folders: Optional initial folders keyed by name

    Returns:
        tuple: (mock client, folder dict)
    """
    store = dict(folders or {})
    client = MagicMock(spec=BigIP)

    def add_folder(folder):
        store[folder.name] = Folder(**{**folder.__dict__, 'full_path': folder.name})

    def get_folder(name):
        return store.get(name)

    def modify_folder(name, folder):
        store[name] = Folder(**{**folder.__dict__, 'full_path': name})

    def delete_folder(name):
        store.pop(name)

    client.add_folder.side_effect = add_folder
    client.get_folder.side_effect = get_folder
    client.modify_folder.side_effect = modify_folder
    client.delete_folder.side_effect = delete_folder
    return client, store


@pytest.fixture
def mock_logger():
    """Fixture providing a mock logger that won't output during tests."""
    logger = MagicMock(spec=logging.Logger)
    return logger


@pytest.fixture
def fake_bigip():
    """Fixture providing an empty mock device."""
    return make_fake_bigip()


@pytest.fixture
def folder_test_config():
    """Fixture providing a test configuration for SysFolderComponent."""
    return {
        'bigip_address': '10.1.1.245',
        'bigip_username': 'admin',
        'bigip_password': 'secret',
        'component_id': 'sys-folder-test-component',
        'folder': {
            'name': '/Common/myfolder',
            'description': 'application folders',
        }
    }
