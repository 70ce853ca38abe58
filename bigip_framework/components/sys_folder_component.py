#!/usr/bin/env python3
"""
BIG-IP sys folder Component for Discovery-Processing-Housekeeping Pattern

This component manages a folder (``/mgmt/tm/sys/folder``) on a BIG-IP device.
The create, read, update, delete and import operations map the declared
folder attributes one-to-one onto the device's folder endpoints; the three
phases use them to bring the device in line with the declared state.
"""

import logging
from typing import Dict, Any, Optional, List, Literal

from bigip_framework.base_component import BaseComponent, ComponentConfig
from bigip_framework.bigip_client import BigIP, Folder
from bigip_framework.resource_data import (
    Attribute, Schema, ResourceData, import_state_passthrough
)

FOLDER_SCHEMA = Schema({
    "name": Attribute(
        required=True,
        force_new=True,
        description="Name of folder",
    ),
    "appService": Attribute(
        description="The application service that the object belongs to.",
    ),
    "description": Attribute(
        description="User-defined description of the folder",
    ),
    "deviceGroup": Attribute(
        default="default",
        description="Associate this folder with a device failover group or device sync group. "
                    "'default' to associate this folder with its parent's device group. "
                    "'non-default' to leave this field's value untouched but disassociate "
                    "this folder from its parent.",
    ),
    "hidden": Attribute(
        default="false",
        description="Specifies if this folder will be hidden. If set to 'true', this folder "
                    "will be hidden from standard command usage.",
    ),
    "noRefCheck": Attribute(
        default="",
        description="Specifies whether strict device group reference validation is performed "
                    "during sync behavior on items in this folder",
    ),
    "trafficGroup": Attribute(
        default="default",
        description="Associate this folder with a network failover group. 'default' to "
                    "associate this folder with its parent's traffic group.",
    ),
})


class SysFolderError(RuntimeError):
    """Raised when a folder lifecycle operation fails on the device."""


class SysFolderConfig(ComponentConfig, total=False):
    """TypedDict for sys folder component configuration."""
    bigip_address: Optional[str]
    bigip_port: int
    bigip_username: str
    bigip_password: Optional[str]
    verify_cert: bool
    token_auth: bool
    login_provider: str
    timeout: float
    state: Literal["present", "absent"]
    resource_id: Optional[str]
    folder: Dict[str, Any]


def folder_config(d: ResourceData) -> Folder:
    """Build the device request object from every attribute of the state record."""
    return Folder(
        name=d.get("name"),
        app_service=d.get("appService"),
        description=d.get("description"),
        device_group=d.get("deviceGroup"),
        hidden=d.get("hidden"),
        no_ref_check=d.get("noRefCheck"),
        traffic_group=d.get("trafficGroup"),
    )


class SysFolderComponent(BaseComponent):
    """
    Component for managing a BIG-IP folder.

    The lifecycle operations (create, read, update, delete, exists,
    import_state) take a ResourceData record and keep its identifier in step
    with the device. The device is the system of record: every read copies
    all remote fields back into the record.
    """

    DEFAULT_CONFIG: SysFolderConfig = {
        'bigip_address': None,
        'bigip_port': 443,
        'bigip_username': 'admin',
        'bigip_password': None,
        'verify_cert': False,
        'token_auth': False,
        'login_provider': 'tmos',
        'timeout': 60,
        'state': 'present',
        'resource_id': None,
        'folder': {},
        'dry_run': False
    }

    def __init__(self, config: SysFolderConfig, logger: Optional[logging.Logger] = None,
                 client: Optional[BigIP] = None):
        """
        Initialize the sys folder component.

        Args:
            config: Configuration dictionary for the component
            logger: Optional logger instance
            client: Optional device client; built from the connection settings when omitted
        """
        merged_config = self.DEFAULT_CONFIG | config

        super().__init__(merged_config, logger)

        self._client = client
        self.desired: Optional[ResourceData] = None
        self.current: Optional[ResourceData] = None

        self.logger.info(f"SysFolderComponent initialized for {self.config.get('bigip_address')}")

    @property
    def client(self) -> BigIP:
        """Device client, connected on first use."""
        if self._client is None:
            self._client = BigIP(
                host=self.config.get('bigip_address'),
                username=self.config.get('bigip_username'),
                password=self.config.get('bigip_password'),
                port=self.config.get('bigip_port'),
                verify_cert=self.config.get('verify_cert'),
                token_auth=self.config.get('token_auth'),
                login_provider=self.config.get('login_provider'),
                timeout=self.config.get('timeout'),
            )
        return self._client

    # Lifecycle operations

    def create(self, d: ResourceData) -> ResourceData:
        """
        Create the folder unless the device already has it, then read it back.

        The identifier is set before the device is contacted and cleared again
        when the create call fails.
        """
        name = d.get("name")
        self.logger.info(f"Configuring Folder {name}")
        folder = folder_config(d)
        self.logger.debug(f"config of Folder to be add: {folder}")

        d.set_id(name)

        try:
            exists = self.exists(d)
        except Exception as e:
            # A failed lookup counts as "not there"; the create call decides
            self.logger.warning(f"Existence check for Folder {name} failed, attempting create: {e}")
            exists = False

        if not exists:
            try:
                self.client.add_folder(folder)
            except Exception as e:
                d.set_id("")
                raise SysFolderError(f"error creating Folder {name}; {e}") from e

        return self.read(d)

    def exists(self, d: ResourceData) -> bool:
        """Check whether the device has a folder with the record's identifier."""
        name = d.id
        self.logger.info(f"Fetching folder {name}")

        try:
            folder = self.client.get_folder(name)
        except Exception as e:
            self.logger.error(f"Unable to retrieve folder {name}: {e}")
            raise

        if folder is None:
            self.logger.warning(f"folder ({name}) not found")
            return False
        return True

    def update(self, d: ResourceData) -> ResourceData:
        """Send every attribute of the record to the device, then read it back."""
        name = d.id
        self.logger.info(f"Updating Folder {name}")
        if changed := d.changed_keys():
            self.logger.debug(f"Changed attributes of Folder {name}: {', '.join(changed)}")

        try:
            self.client.modify_folder(name, folder_config(d))
        except Exception as e:
            raise SysFolderError(f"Error modifying Folder {name}: {e}") from e

        return self.read(d)

    def read(self, d: ResourceData) -> ResourceData:
        """
        Refresh the record from the device.

        A folder missing on the device clears the identifier, which tells the
        caller to drop the record from tracked state.
        """
        name = d.id
        self.logger.info(f"Reading Folder {name}")

        try:
            folder = self.client.get_folder(name)
        except Exception as e:
            self.logger.error(f"Unable to Retrieve Folder ({e})")
            raise SysFolderError(f"Error reading Folder {name}: {e}") from e

        if folder is None:
            self.logger.warning(f"Folder ({name}) not found, removing from state")
            d.set_id("")
            return d

        d.set("name", folder.full_path or folder.name)
        d.set("appService", folder.app_service)
        d.set("description", folder.description)
        d.set("deviceGroup", folder.device_group)
        d.set("hidden", folder.hidden)
        d.set("noRefCheck", folder.no_ref_check)
        d.set("trafficGroup", folder.traffic_group)

        return d

    def delete(self, d: ResourceData) -> None:
        """Remove the folder; the identifier is only cleared once the device confirms."""
        name = d.id
        self.logger.info(f"Deleting Folder: {name}")

        try:
            self.client.delete_folder(name)
        except Exception as e:
            self.logger.error(f"Unable to Delete Folder ({name}) ({e})")
            raise SysFolderError(f"Error deleting Folder {name}: {e}") from e

        d.set_id("")

    def import_state(self, resource_id: str) -> List[ResourceData]:
        """Import an existing folder by its name."""
        self.logger.info(f"Importing Folder {resource_id}")
        records = import_state_passthrough(FOLDER_SCHEMA, resource_id)
        for d in records:
            self.read(d)
            if not d.id:
                raise SysFolderError(f"Cannot import non-existent remote object: Folder {resource_id}")
        return records

    # Phases

    def _declared(self) -> ResourceData:
        return ResourceData(FOLDER_SCHEMA, self.config.get('folder') or {})

    def _discover(self) -> Dict[str, Any]:
        """
        Discovery phase: Compare the declared folder with the device.

        Returns:
            Dictionary of discovery results
        """
        self.desired = self._declared()
        resource_id = self.config.get('resource_id') or self.desired.get("name")
        self.current = ResourceData(FOLDER_SCHEMA, resource_id=resource_id)

        self.discovery_results = {
            'resource_id': resource_id,
            'exists': False,
            'observed': None,
            'drift': [],
            'force_new': []
        }

        if not self.exists(self.current):
            self.current.set_id("")
            return self.discovery_results

        self.read(self.current)
        drift = self.desired.diff(self.current)
        self.discovery_results |= {
            'exists': bool(self.current.id),
            'observed': self.current.to_dict(),
            'drift': drift,
            'force_new': [key for key in FOLDER_SCHEMA.force_new_keys if key in drift]
        }

        if drift:
            self.logger.info(f"Folder {resource_id} differs from declared state: {', '.join(drift)}")
        return self.discovery_results

    def _plan(self) -> str:
        exists = self.discovery_results.get('exists', False)
        if self.config.get('state') == 'absent':
            return 'delete' if exists else 'none'
        if not exists:
            return 'create'
        if self.discovery_results.get('force_new'):
            return 'replace'
        if self.discovery_results.get('drift'):
            return 'update'
        return 'none'

    def _process(self) -> Dict[str, Any]:
        """
        Processing phase: Run the lifecycle operation the discovery calls for.

        Returns:
            Dictionary of processing results
        """
        if self.desired is None:
            self.discover()

        action = self._plan()
        self.processing_results = {
            'action': action,
            'changed': action != 'none',
            'resource_id': self.current.id,
            'dry_run': False
        }

        if self.config.get('dry_run', False):
            self.logger.info(f"DRY RUN: Would {action} Folder {self.desired.get('name')}")
            self.processing_results['dry_run'] = True
            return self.processing_results

        # Operations read back into the record they get; self.desired stays as declared
        if action == 'create':
            self.current = self.create(self._declared())
        elif action == 'replace':
            self.delete(self.current)
            self.current = self.create(self._declared())
        elif action == 'update':
            d = self._declared()
            d.set_id(self.current.id)
            self.current = self.update(d)
        elif action == 'delete':
            self.delete(self.current)
        else:
            self.logger.info(f"Folder {self.desired.get('name')} is up to date")

        self.processing_results['resource_id'] = self.current.id
        return self.processing_results

    def _housekeep(self) -> Dict[str, Any]:
        """
        Housekeeping phase: Verify the device matches the declared state.

        Returns:
            Dictionary of housekeeping results
        """
        self.housekeeping_results = {
            'verified': False,
            'final_state': None,
            'warnings': []
        }

        if self.config.get('dry_run', False) or self.processing_results.get('dry_run', False):
            self.logger.info("DRY RUN: Would verify folder configuration")
            self.housekeeping_results['dry_run'] = True
            return self.housekeeping_results

        if self.current is None:
            self.discover()

        final = ResourceData(FOLDER_SCHEMA, resource_id=self.current.id or self.desired.get("name"))
        self.read(final)

        if self.config.get('state') == 'absent':
            verified = not final.id
            if not verified:
                self.housekeeping_results['warnings'].append(f"Folder {final.id} still present on device")
        else:
            mismatched = self.desired.diff(final) if final.id else list(FOLDER_SCHEMA)
            verified = bool(final.id) and not mismatched
            for key in mismatched:
                self.housekeeping_results['warnings'].append(
                    f"{key}: declared {self.desired.get(key)!r}, device reports {final.get(key)!r}"
                )

        for warning in self.housekeeping_results['warnings']:
            self.logger.warning(warning)

        self.housekeeping_results['verified'] = verified
        self.housekeeping_results['final_state'] = final.to_dict()
        self.add_artifact('state', final.to_dict(), {
            'resource_id': final.id,
            'description': f"Folder state after {self.processing_results.get('action', 'none')}"
        })

        return self.housekeeping_results
