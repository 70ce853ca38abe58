#!/usr/bin/env python3
"""
Unit tests for the SysFolderComponent discovery-processing-housekeeping phases.
"""

import os
import sys
import pytest

# Add the project root to the Python path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '../../../../')))

from bigip_framework.bigip_client import BigIPError, Folder
from bigip_framework.components.sys_folder_component import SysFolderComponent
from bigip_framework.resource_data import SchemaError
from tests.conftest import make_fake_bigip


def device_folder(**values):
    """Folder as the device would report it for the test config."""
    defaults = {
        'name': 'myfolder',
        'full_path': '/Common/myfolder',
        'description': 'application folders',
        'device_group': 'default',
        'hidden': 'false',
        'traffic_group': 'default',
    }
    return Folder(**{**defaults, **values})


class TestDiscovery:
    """Discovery compares the declared folder with the device."""

    def test_missing_folder(self, folder_test_config, fake_bigip):
        client, _ = fake_bigip
        component = SysFolderComponent(folder_test_config, client=client)

        results = component.discover()

        assert results == {
            'resource_id': '/Common/myfolder',
            'exists': False,
            'observed': None,
            'drift': [],
            'force_new': []
        }
        assert component.current.id == ''

    def test_matching_folder(self, folder_test_config):
        client, _ = make_fake_bigip({'/Common/myfolder': device_folder()})
        component = SysFolderComponent(folder_test_config, client=client)

        results = component.discover()

        assert results['exists'] is True
        assert results['drift'] == []
        assert results['observed']['description'] == 'application folders'

    def test_drift(self, folder_test_config):
        client, _ = make_fake_bigip({'/Common/myfolder': device_folder(description='edited by hand')})
        component = SysFolderComponent(folder_test_config, client=client)

        results = component.discover()

        assert results['drift'] == ['description']
        assert results['force_new'] == []

    def test_renamed_folder_needs_replacement(self, folder_test_config):
        client, _ = make_fake_bigip({'/Common/oldname': device_folder(full_path='/Common/oldname')})
        config = {**folder_test_config, 'resource_id': '/Common/oldname'}
        component = SysFolderComponent(config, client=client)

        results = component.discover()

        assert results['resource_id'] == '/Common/oldname'
        assert results['force_new'] == ['name']

    def test_invalid_declaration(self, folder_test_config, fake_bigip):
        client, _ = fake_bigip
        config = {**folder_test_config, 'folder': {'description': 'no name'}}
        component = SysFolderComponent(config, client=client)

        with pytest.raises(SchemaError):
            component.discover()

        assert component.status['message'].startswith("Discovery phase failed")

    def test_lookup_error_fails_discovery(self, folder_test_config, fake_bigip):
        client, _ = fake_bigip
        client.get_folder.side_effect = BigIPError("HTTP 401 :: unauthorized", 401)
        component = SysFolderComponent(folder_test_config, client=client)

        with pytest.raises(BigIPError):
            component.discover()

        assert component.status['success'] is False


class TestExecute:
    """Full runs against the mock device."""

    def test_create(self, folder_test_config, fake_bigip):
        client, store = fake_bigip
        component = SysFolderComponent(folder_test_config, client=client)

        results = component.execute()

        assert 'error' not in results
        assert results['processing'] == {
            'action': 'create',
            'changed': True,
            'resource_id': '/Common/myfolder',
            'dry_run': False
        }
        assert results['housekeeping']['verified'] is True
        assert results['housekeeping']['final_state']['description'] == 'application folders'
        assert '/Common/myfolder' in store
        assert component.artifacts[0]['type'] == 'state'
        assert component.artifacts[0]['metadata']['resource_id'] == '/Common/myfolder'

    def test_no_change(self, folder_test_config):
        client, _ = make_fake_bigip({'/Common/myfolder': device_folder()})
        component = SysFolderComponent(folder_test_config, client=client)

        results = component.execute()

        assert results['processing']['action'] == 'none'
        assert results['processing']['changed'] is False
        client.add_folder.assert_not_called()
        client.modify_folder.assert_not_called()
        client.delete_folder.assert_not_called()

    def test_update(self, folder_test_config):
        client, store = make_fake_bigip({'/Common/myfolder': device_folder(description='edited by hand')})
        component = SysFolderComponent(folder_test_config, client=client)

        results = component.execute()

        assert results['processing']['action'] == 'update'
        client.modify_folder.assert_called_once()
        assert store['/Common/myfolder'].description == 'application folders'
        assert results['housekeeping']['verified'] is True

    def test_replace(self, folder_test_config):
        client, store = make_fake_bigip({'/Common/oldname': device_folder(full_path='/Common/oldname')})
        config = {**folder_test_config, 'resource_id': '/Common/oldname'}
        component = SysFolderComponent(config, client=client)

        results = component.execute()

        assert results['processing']['action'] == 'replace'
        client.delete_folder.assert_called_once_with('/Common/oldname')
        assert '/Common/oldname' not in store
        assert '/Common/myfolder' in store
        assert results['processing']['resource_id'] == '/Common/myfolder'

    def test_delete(self, folder_test_config):
        client, store = make_fake_bigip({'/Common/myfolder': device_folder()})
        config = {**folder_test_config, 'state': 'absent'}
        component = SysFolderComponent(config, client=client)

        results = component.execute()

        assert results['processing']['action'] == 'delete'
        assert results['processing']['resource_id'] == ''
        assert store == {}
        assert results['housekeeping']['verified'] is True

    def test_absent_and_missing(self, folder_test_config, fake_bigip):
        client, _ = fake_bigip
        config = {**folder_test_config, 'state': 'absent'}
        component = SysFolderComponent(config, client=client)

        results = component.execute()

        assert results['processing']['action'] == 'none'
        client.delete_folder.assert_not_called()

    def test_dry_run(self, folder_test_config, fake_bigip):
        client, store = fake_bigip
        config = {**folder_test_config, 'dry_run': True}
        component = SysFolderComponent(config, client=client)

        results = component.execute()

        assert results['processing']['action'] == 'create'
        assert results['processing']['dry_run'] is True
        assert results['housekeeping']['dry_run'] is True
        client.add_folder.assert_not_called()
        assert store == {}

    def test_device_keeps_other_value(self, folder_test_config, fake_bigip):
        client, store = fake_bigip

        def add_folder(folder):
            # Device normalises the traffic group name
            store[folder.name] = Folder(**{**folder.__dict__, 'traffic_group': '/Common/traffic-group-1'})

        client.add_folder.side_effect = add_folder
        component = SysFolderComponent(folder_test_config, client=client)

        results = component.execute()

        assert results['housekeeping']['verified'] is False
        assert results['housekeeping']['warnings'] == [
            "trafficGroup: declared 'default', device reports '/Common/traffic-group-1'"
        ]

    def test_create_failure(self, folder_test_config, fake_bigip):
        client, _ = fake_bigip
        client.add_folder.side_effect = BigIPError("HTTP 409 :: conflict", 409)
        component = SysFolderComponent(folder_test_config, client=client)

        results = component.execute()

        assert results['error'] == "error creating Folder /Common/myfolder; HTTP 409 :: conflict"
        assert component.status['success'] is False
        assert component.current.id == ''
        assert 'housekeeping' not in results
