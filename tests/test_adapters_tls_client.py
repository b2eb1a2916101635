"""Regression tests for etcd TLS client construction."""

from __future__ import annotations

from pathlib import Path
import ssl

import certifi
import httpx
import pytest

from etcd_readiness.adapters import TlsConfigurationError, tls_create_client, tls_create_ssl_context
from etcd_readiness.domain import TlsCredentials


def _write_file(directory: Path, name: str, content: str) -> str:
    """Write one text file and return its path.

    Args:
        directory: Target directory.
        name: File name.
        content: File content.

    Returns:
        str: Written file path.
    """

    file_path = directory / name
    file_path.write_text(content, encoding="utf-8")
    return str(file_path)


def test_adapters_tls_client_without_material_uses_system_trust() -> None:
    """Create a verifying client when neither CA nor client cert is configured."""

    client = tls_create_client(TlsCredentials(), timeout_seconds=3.0)
    try:
        assert isinstance(client, httpx.Client)
        assert client.timeout.connect == pytest.approx(3.0)
    finally:
        client.close()


def test_adapters_tls_client_loads_custom_ca_bundle() -> None:
    """Load a valid CA bundle without presenting a client certificate."""

    context = tls_create_ssl_context(TlsCredentials(ca_file=certifi.where()))

    assert context.verify_mode == ssl.CERT_REQUIRED
    assert context.check_hostname is True


def test_adapters_tls_client_malformed_ca_raises_configuration_error(tmp_path: Path) -> None:
    """Raise TlsConfigurationError when the CA file holds no certificate.

    Args:
        tmp_path: Pytest temporary directory fixture.

    Raises:
        AssertionError: Raised when malformed CA material is accepted.
    """

    ca_file = _write_file(tmp_path, "ca.pem", "not a certificate")

    with pytest.raises(TlsConfigurationError, match="CA file"):
        tls_create_client(TlsCredentials(ca_file=ca_file))


def test_adapters_tls_client_missing_ca_raises_configuration_error(tmp_path: Path) -> None:
    """Raise TlsConfigurationError when the CA file cannot be read."""

    with pytest.raises(TlsConfigurationError):
        tls_create_client(TlsCredentials(ca_file=str(tmp_path / "missing.pem")))


def test_adapters_tls_client_malformed_client_certificate_raises_configuration_error(tmp_path: Path) -> None:
    """Raise TlsConfigurationError when the client certificate/key pair is garbage.

    Args:
        tmp_path: Pytest temporary directory fixture.

    Raises:
        AssertionError: Raised when malformed client material is accepted.
    """

    cert_file = _write_file(tmp_path, "client.pem", "garbage certificate")
    key_file = _write_file(tmp_path, "client-key.pem", "garbage key")

    with pytest.raises(TlsConfigurationError, match="client certificate"):
        tls_create_client(TlsCredentials(ca_file=certifi.where(), cert_file=cert_file, key_file=key_file))


def test_adapters_tls_credentials_reject_cert_without_key() -> None:
    """Reject a client certificate configured without its private key."""

    with pytest.raises(ValueError, match="provided together"):
        TlsCredentials(cert_file="/etc/etcd/client.pem")


def test_adapters_tls_client_rejects_non_positive_timeout() -> None:
    with pytest.raises(ValueError, match="timeout_seconds"):
        tls_create_client(TlsCredentials(), timeout_seconds=0)
