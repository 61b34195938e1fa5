"""
SFTP session + channel for remote sync runs.

One SFTPConnection is owned by exactly one sync call; it is never shared
across concurrent runs.
"""

from __future__ import annotations

import socket
from pathlib import Path
from typing import Any

import paramiko

from catalogpdf.exceptions import ConnectionError_
from catalogpdf.sync.types import Credentials, RemoteEndpoint
from catalogpdf.utils.logging import get_logger

logger = get_logger("catalogpdf.sync.sftp")

DEFAULT_KNOWN_HOSTS = "~/.ssh/known_hosts"


class SFTPConnection:
    """
    Password-authenticated SFTP connection.

    ``session`` is the SSH transport, ``channel`` the SFTP client opened on it.
    Host keys are checked against a known-hosts file unless the endpoint
    explicitly sets ``verify_host_key=False``.
    """

    def __init__(self, endpoint: RemoteEndpoint, credentials: Credentials):
        self.endpoint = endpoint
        self.credentials = credentials
        self.session: paramiko.Transport | None = None
        self.channel: paramiko.SFTPClient | None = None

    def connect(self) -> paramiko.SFTPClient:
        """Connect (lazy) and return a live `paramiko.SFTPClient`."""
        if self.channel is not None:
            return self.channel

        ep = self.endpoint
        timeout = ep.connect_timeout_s
        try:
            sock = socket.create_connection((ep.host, ep.port), timeout=timeout)
        except OSError as e:
            raise ConnectionError_(f"Cannot reach {ep.host}:{ep.port}: {e}") from e

        transport = paramiko.Transport(sock)
        transport.banner_timeout = timeout
        transport.auth_timeout = timeout
        self.session = transport
        try:
            transport.start_client(timeout=timeout)
            self._check_host_key(transport.get_remote_server_key())
            transport.auth_password(self.credentials.username, self.credentials.password)
            self.channel = paramiko.SFTPClient.from_transport(transport)
        except ConnectionError_:
            self.close()
            raise
        except (paramiko.SSHException, OSError, EOFError) as e:
            self.close()
            raise ConnectionError_(f"SFTP connection to {ep.host}:{ep.port} failed: {e}") from e

        if self.channel is None:
            self.close()
            raise ConnectionError_(f"SFTP channel to {ep.host}:{ep.port} could not be opened")

        logger.info(f"Connected to sftp://{ep.host}:{ep.port} as '{self.credentials.username}'")
        return self.channel

    def _check_host_key(self, server_key: paramiko.PKey) -> None:
        ep = self.endpoint
        if not ep.verify_host_key:
            logger.warning(
                f"Host key verification is disabled for {ep.host}:{ep.port}; "
                f"accepting {server_key.get_name()} key without checking"
            )
            return

        known_hosts = Path(ep.known_hosts_path or DEFAULT_KNOWN_HOSTS).expanduser()
        host_keys = paramiko.HostKeys()
        if known_hosts.is_file():
            host_keys.load(str(known_hosts))

        lookup_name = ep.host if ep.port == 22 else f"[{ep.host}]:{ep.port}"
        if not host_keys.check(lookup_name, server_key):
            raise ConnectionError_(
                f"Host key for {lookup_name} ({server_key.get_name()}) is not trusted by {known_hosts}",
                details={"host": ep.host, "port": ep.port},
            )

    def close(self) -> list[Exception]:
        """
        Close channel then session.

        Each step is attempted even if the other fails; errors are logged and
        returned rather than raised.
        """
        errors: list[Exception] = []
        if self.channel is not None:
            try:
                self.channel.close()
            except Exception as e:
                logger.warning(f"Error closing SFTP channel: {e}")
                errors.append(e)
            finally:
                self.channel = None
        if self.session is not None:
            try:
                self.session.close()
            except Exception as e:
                logger.warning(f"Error closing SSH session: {e}")
                errors.append(e)
            finally:
                self.session = None
        return errors

    def __enter__(self) -> SFTPConnection:
        self.connect()
        return self

    def __exit__(self, exc_type: type[BaseException] | None, exc: BaseException | None, tb: Any) -> None:
        self.close()
