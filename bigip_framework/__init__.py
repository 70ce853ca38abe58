"""
Framework Package for BIG-IP resource components

This package provides the core framework for the component-based architecture
with discovery-processing-housekeeping pattern, the BIG-IP REST client and the
resource schema/state record the lifecycle operations work on.
"""

from .base_component import BaseComponent
from .bigip_client import BigIP, BigIPError, Folder
from .resource_data import Attribute, ResourceData, Schema, SchemaError

__all__ = [
    'BaseComponent', 'BigIP', 'BigIPError', 'Folder',
    'Attribute', 'ResourceData', 'Schema', 'SchemaError'
]
