#!/usr/bin/env python3
"""
BIG-IP iControl REST client

Thin session wrapper around the device's ``/mgmt/tm`` API. Only the folder
endpoints used by the sys folder component are exposed.
"""

import logging
from dataclasses import dataclass, fields
from typing import Dict, Any, Optional

import requests
import urllib3

logger = logging.getLogger(__name__)

URI_SYS = "sys"
URI_FOLDER = "folder"


class BigIPError(RuntimeError):
    """Raised when a request to the device fails."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


@dataclass
class Folder:
    """A ``sys folder`` object as the device reports it."""

    name: str
    app_service: str = ""
    description: str = ""
    device_group: str = ""
    hidden: str = ""
    no_ref_check: str = ""
    traffic_group: str = ""
    full_path: str = ""
    generation: int = 0

    # attribute -> device JSON key
    JSON_KEYS = {
        'name': 'name',
        'app_service': 'appService',
        'description': 'description',
        'device_group': 'deviceGroup',
        'hidden': 'hidden',
        'no_ref_check': 'noRefCheck',
        'traffic_group': 'trafficGroup',
        'full_path': 'fullPath',
        'generation': 'generation',
    }
    READ_ONLY = ('full_path', 'generation')

    @classmethod
    def from_response(cls, data: Dict[str, Any]) -> "Folder":
        """Create a Folder from a device response body."""
        values = {}
        for f in fields(cls):
            key = cls.JSON_KEYS[f.name]
            if f.name == 'generation':
                values[f.name] = int(data.get(key, 0) or 0)
            else:
                values[f.name] = str(data.get(key, "") or "")
        return cls(**values)

    def to_payload(self, include_empty: bool = False) -> Dict[str, Any]:
        """
        Request body for add/modify.

        Empty optional values are left out unless include_empty is set; a
        replacing PUT needs them to clear a property on the device.
        """
        payload: Dict[str, Any] = {'name': self.name}
        for f in fields(self):
            if f.name == 'name' or f.name in self.READ_ONLY:
                continue
            value = getattr(self, f.name)
            if value or include_empty:
                payload[self.JSON_KEYS[f.name]] = value
        return payload


def folder_path(name: str) -> str:
    """Map a folder name such as ``/Common/apps`` onto its URI form ``~Common~apps``."""
    return name.replace("/", "~")


class BigIP:
    """
    Session against one BIG-IP management address.

    Authenticates with HTTP basic auth, or with a login token from
    ``/mgmt/shared/authn/login`` when ``token_auth`` is set.
    """

    def __init__(self, host: str, username: str, password: str,
                 port: int = 443, verify_cert: bool = False, token_auth: bool = False,
                 login_provider: str = "tmos", timeout: float = 60.0,
                 session: Optional[requests.Session] = None):
        if not host:
            raise ValueError("BIG-IP address is required")

        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.token_auth = token_auth
        self.login_provider = login_provider
        self.timeout = timeout
        self.base_url = f"https://{host}:{port}"
        self.token: Optional[str] = None

        self.session = session or requests.Session()
        self.session.verify = verify_cert
        self.session.headers.update({"Content-Type": "application/json"})

        if not verify_cert:
            # Devices usually present a self-signed certificate
            urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)

        if token_auth:
            self._login()
        else:
            self.session.auth = (username, password)

        logger.debug(f"BIG-IP session set up for {self.base_url}")

    def _login(self) -> None:
        """Fetch an auth token and attach it to the session."""
        url = f"{self.base_url}/mgmt/shared/authn/login"
        body = {
            "username": self.username,
            "password": self.password,
            "loginProviderName": self.login_provider,
        }
        try:
            response = self.session.post(url, json=body, timeout=self.timeout)
            response.raise_for_status()
        except requests.exceptions.HTTPError as e:
            raise BigIPError(f"Authentication failed: {self._error_message(e.response)}",
                             e.response.status_code) from e
        except requests.exceptions.RequestException as e:
            raise BigIPError(f"Unable to reach {self.host}: {e}") from e

        self.token = response.json().get('token', {}).get('token')
        if not self.token:
            raise BigIPError("Authentication failed: no token in login response")
        self.session.headers.update({"X-F5-Auth-Token": self.token})
        logger.info(f"Obtained auth token from {self.host}")

    def _url(self, *parts: str) -> str:
        return "/".join([f"{self.base_url}/mgmt/tm", *parts])

    @staticmethod
    def _error_message(response: Optional[requests.Response]) -> str:
        """Pull the device's error message out of a failed response."""
        if response is None:
            return "no response"
        try:
            body = response.json()
        except ValueError:
            return response.text or f"HTTP {response.status_code}"
        return str(body.get('message') or body)

    def _request(self, method: str, url: str, **kwargs) -> requests.Response:
        logger.debug(f"{method} {url}")
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.exceptions.RequestException as e:
            raise BigIPError(f"{method} {url} failed: {e}") from e

        if response.status_code >= 400:
            raise BigIPError(
                f"HTTP {response.status_code} :: {self._error_message(response)}",
                response.status_code,
            )
        return response

    def add_folder(self, folder: Folder) -> None:
        """Create a folder."""
        self._request("POST", self._url(URI_SYS, URI_FOLDER), json=folder.to_payload())

    def get_folder(self, name: str) -> Optional[Folder]:
        """Fetch a folder by name; None when the device does not have it."""
        try:
            response = self._request("GET", self._url(URI_SYS, URI_FOLDER, folder_path(name)))
        except BigIPError as e:
            if e.status_code == 404:
                return None
            raise
        return Folder.from_response(response.json())

    def modify_folder(self, name: str, folder: Folder) -> None:
        """Replace every writable property of a folder."""
        self._request("PUT", self._url(URI_SYS, URI_FOLDER, folder_path(name)),
                      json=folder.to_payload(include_empty=True))

    def delete_folder(self, name: str) -> None:
        """Remove a folder."""
        self._request("DELETE", self._url(URI_SYS, URI_FOLDER, folder_path(name)))
