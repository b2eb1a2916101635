"""HTTPS client factory for mutually authenticated etcd connections."""

from __future__ import annotations

import logging
import ssl

import httpx

from etcd_readiness.domain import TlsCredentials

from .errors import TlsConfigurationError

logger = logging.getLogger(__name__)


def tls_create_ssl_context(credentials: TlsCredentials) -> ssl.SSLContext:
    """Build a client SSL context from optional CA and client certificate files.

    File existence is checked by the caller; this function only loads material.

    Args:
        credentials: TLS credential paths.

    Returns:
        ssl.SSLContext: Client context with server verification enabled.

    Raises:
        TlsConfigurationError: Raised when any file is unreadable or malformed.
    """

    try:
        if credentials.ca_file is not None:
            context = ssl.create_default_context(cafile=credentials.ca_file)
        else:
            context = ssl.create_default_context()
    except (OSError, ssl.SSLError) as error:
        raise TlsConfigurationError(f"Failed loading CA file '{credentials.ca_file}': {error}") from error

    cert_and_key = credentials.credentials_cert_and_key()
    if cert_and_key is not None:
        cert_file, key_file = cert_and_key
        try:
            context.load_cert_chain(certfile=cert_file, keyfile=key_file)
        except (OSError, ssl.SSLError) as error:
            raise TlsConfigurationError(
                f"Failed loading client certificate '{cert_file}' with key '{key_file}': {error}"
            ) from error

    return context


def tls_create_client(credentials: TlsCredentials, timeout_seconds: float = 5.0) -> httpx.Client:
    """Create the shared HTTPS client for talking to etcd.

    Args:
        credentials: TLS credential paths.
        timeout_seconds: Per-request transport timeout.

    Returns:
        httpx.Client: Client presenting the configured TLS material.

    Raises:
        TlsConfigurationError: Raised when TLS material cannot be loaded.
        ValueError: Raised when timeout is not positive.
    """

    if timeout_seconds <= 0:
        raise ValueError("timeout_seconds must be > 0")

    context = tls_create_ssl_context(credentials)
    logger.debug(
        "Created etcd TLS client (ca=%s, client_cert=%s)",
        credentials.ca_file or "<system>",
        credentials.cert_file or "<none>",
    )
    return httpx.Client(verify=context, timeout=timeout_seconds)
