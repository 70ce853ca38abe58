#!/usr/bin/env python3
"""
manage_sys_folder.py - Manage a BIG-IP folder using SysFolderComponent

This script brings a folder on a BIG-IP device in line with a declared
configuration, given on the command line or in a YAML file. It follows the
discovery-processing-housekeeping pattern and prints the results as JSON.

Example YAML file:

    bigip_address: 10.1.1.245
    bigip_username: admin
    state: present
    folder:
      name: /Common/apps
      description: application folders
"""

import os
import sys
import json
import logging
import argparse
from typing import Dict, Any, Optional, List

import yaml

# Add project root to path for imports
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '../')))

from bigip_framework.components.sys_folder_component import SysFolderComponent, FOLDER_SCHEMA
from bigip_framework.resource_data import SchemaError

# Command line flag -> folder attribute
FOLDER_FLAGS = {
    'name': 'name',
    'app_service': 'appService',
    'description': 'description',
    'device_group': 'deviceGroup',
    'hidden': 'hidden',
    'no_ref_check': 'noRefCheck',
    'traffic_group': 'trafficGroup',
}


def setup_logging(verbose: bool = False) -> logging.Logger:
    """Set up logging configuration"""
    log_level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=log_level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[logging.StreamHandler()]
    )
    return logging.getLogger("manage-sys-folder")


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments"""
    parser = argparse.ArgumentParser(description="Manage a BIG-IP folder using component architecture")

    # Device connection
    parser.add_argument("--config", help="YAML file with connection and folder settings")
    parser.add_argument("--server", help="BIG-IP management address")
    parser.add_argument("--port", type=int, help="BIG-IP management port")
    parser.add_argument("--user", help="BIG-IP username")
    parser.add_argument("--password", help="BIG-IP password (default: $BIGIP_PASSWORD)")
    parser.add_argument("--token-auth", action="store_true", help="Authenticate with a login token")
    parser.add_argument("--verify-cert", action="store_true", help="Verify the device certificate")

    # Folder attributes
    parser.add_argument("--name", help="Folder name, e.g. /Common/apps")
    parser.add_argument("--app-service", help="Application service the folder belongs to")
    parser.add_argument("--description", help="Folder description")
    parser.add_argument("--device-group", help="Device group of the folder")
    parser.add_argument("--hidden", choices=["true", "false"], help="Hide the folder")
    parser.add_argument("--no-ref-check", help="Strict device group reference validation")
    parser.add_argument("--traffic-group", help="Traffic group of the folder")

    # Lifecycle options
    parser.add_argument("--state", choices=["present", "absent"], help="Declared state of the folder")
    parser.add_argument("--resource-id", help="Identifier of the folder as previously stored")
    parser.add_argument("--import", dest="import_id", help="Import an existing folder by name and print it")

    # General options
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")
    parser.add_argument("--dry-run", action="store_true", help="Dry run (no changes on the device)")

    return parser.parse_args(argv)


def load_config(path: Optional[str]) -> Dict[str, Any]:
    """Load settings from a YAML file; an empty file gives an empty dict."""
    if not path:
        return {}
    with open(path, 'r') as f:
        config = yaml.safe_load(f) or {}
    if not isinstance(config, dict):
        raise ValueError(f"{path} must contain a mapping")
    return config


def build_config(args: argparse.Namespace) -> Dict[str, Any]:
    """
    Merge the YAML file, the environment and the command line into a component config

    Args:
        args: Command line arguments

    Returns:
        Configuration dictionary for SysFolderComponent
    """
    config = load_config(args.config)
    folder = dict(config.get('folder') or {})

    overrides = {
        'bigip_address': args.server,
        'bigip_port': args.port,
        'bigip_username': args.user,
        'bigip_password': args.password,
        'state': args.state,
        'resource_id': args.resource_id,
    }
    config.update({key: value for key, value in overrides.items() if value is not None})

    if args.token_auth:
        config['token_auth'] = True
    if args.verify_cert:
        config['verify_cert'] = True
    if args.dry_run:
        config['dry_run'] = True

    if not config.get('bigip_password'):
        config['bigip_password'] = os.environ.get('BIGIP_PASSWORD')

    for flag, attribute in FOLDER_FLAGS.items():
        value = getattr(args, flag)
        if value is not None:
            folder[attribute] = value

    unknown = [key for key in folder if key not in FOLDER_SCHEMA]
    if unknown:
        raise SchemaError(f"Unsupported folder argument(s): {', '.join(unknown)}")

    config['folder'] = folder
    return config


def manage_folder(args: argparse.Namespace, logger: logging.Logger) -> Dict[str, Any]:
    """
    Run the folder component, or an import when requested

    Args:
        args: Command line arguments
        logger: Logger instance

    Returns:
        Results to print
    """
    config = build_config(args)
    component = SysFolderComponent(config, logger)

    if args.import_id:
        logger.info(f"Importing folder {args.import_id}...")
        records = component.import_state(args.import_id)
        return {'imported': [d.to_dict() for d in records]}

    logger.info(f"Reconciling folder {config['folder'].get('name')} on {config.get('bigip_address')}...")
    results = component.execute()

    if 'error' in results:
        logger.error(f"Folder management failed: {results['error']}")
    else:
        processing = results.get('processing', {})
        logger.info(f"Action: {processing.get('action')} (changed: {processing.get('changed')})")

    return dict(results)


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main function that manages the folder

    Returns:
        Exit code (0 for success, 1 for failure)
    """
    args = parse_arguments(argv)
    logger = setup_logging(args.verbose)

    try:
        results = manage_folder(args, logger)
    except Exception as e:
        logger.error(f"Unhandled exception: {str(e)}")
        if args.verbose:
            import traceback
            logger.error(traceback.format_exc())
        return 1

    print(json.dumps(results, indent=2, default=str))
    return 1 if 'error' in results else 0


if __name__ == "__main__":
    sys.exit(main())
