"""
Components Package for BIG-IP resource components

This package contains specialized components that implement the
discovery-processing-housekeeping pattern for BIG-IP configuration objects.
"""

from .sys_folder_component import SysFolderComponent, SysFolderError, FOLDER_SCHEMA

__all__ = ['SysFolderComponent', 'SysFolderError', 'FOLDER_SCHEMA']
