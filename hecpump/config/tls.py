import ssl
from ssl import SSLContext
from pathlib import Path
from typing import NamedTuple, Optional, Union

import certifi

from hecpump.errors import TLSSetupError
from .log_codes import (
    TLS_VERIFY_DISABLED,
    TLS_CLIENT_CERT_LOADED,
    TLS_CLIENT_CERT_FAILED,
)

import logging

logger = logging.getLogger(__name__)


class TLSConfig(NamedTuple):
    """
    TLS configuration owned by a single client.

    Args:
        skip_verify (bool): Whether server certificate verification is disabled.
        cert_file (Optional[Path]): Client certificate path when verifying.
        key_file (Optional[Path]): Client private key path when verifying.
        server_name (Optional[str]): Expected server name (SNI and hostname check).
        verify_context (SSLContext): The resolved context, never shared between clients.
    """

    skip_verify: bool
    cert_file: Optional[Path]
    key_file: Optional[Path]
    server_name: Optional[str]
    verify_context: SSLContext

    def as_dict(self) -> dict[str, Union[str, bool, None]]:
        """
        Convert TLS configuration to dictionary representation.

        Returns:
            dict: Dictionary containing TLS configuration data.
        """
        return {
            "ssl_insecure_skip_verify": self.skip_verify,
            "ssl_cert_file": str(self.cert_file) if self.cert_file else None,
            "ssl_key_file": str(self.key_file) if self.key_file else None,
            "ssl_server_name": self.server_name,
        }


def _insecure_context() -> SSLContext:
    context = ssl.create_default_context()
    context.check_hostname = False
    context.verify_mode = ssl.CERT_NONE
    return context


def _client_cert_context(cert_file: str, key_file: str) -> SSLContext:
    """
    Build a verifying context presenting the client certificate pair.

    Args:
        cert_file (str): The PEM certificate path.
        key_file (str): The PEM private key path.

    Returns:
        SSLContext: A context verifying servers against the certifi bundle.

    Raises:
        TLSSetupError: If either path is empty or the pair cannot be loaded.
    """
    if not cert_file or not key_file:
        raise TLSSetupError(
            cert_file=cert_file,
            key_file=key_file,
            reason="both a certificate and a key file are required when verification is enabled",
        )

    context = ssl.create_default_context(cafile=certifi.where())

    try:
        context.load_cert_chain(certfile=cert_file, keyfile=key_file)
    except ssl.SSLError as e:
        logger.debug(TLS_CLIENT_CERT_FAILED, extra={"cert_file": cert_file, "reason": str(e)})
        raise TLSSetupError(cert_file=cert_file, key_file=key_file, reason=str(e)) from e
    except OSError as e:
        logger.debug(TLS_CLIENT_CERT_FAILED, extra={"cert_file": cert_file, "reason": str(e)})
        raise TLSSetupError(
            cert_file=cert_file, key_file=key_file, reason=e.strerror or str(e)
        ) from e

    return context


def build_tls_config(
    skip_verify: bool,
    cert_file: Optional[str] = None,
    key_file: Optional[str] = None,
    server_name: Optional[str] = None,
) -> TLSConfig:
    """
    Build the TLS configuration for one client.

    With verification disabled the certificate settings are ignored. Otherwise
    the client certificate pair must load, and the server is verified against
    the certifi CA bundle.

    Args:
        skip_verify (bool): Disable server certificate verification.
        cert_file (Optional[str]): Client certificate path.
        key_file (Optional[str]): Client private key path.
        server_name (Optional[str]): Expected TLS server name.

    Returns:
        TLSConfig: The TLS configuration.

    Raises:
        TLSSetupError: If verification is enabled and the pair cannot be loaded.
    """
    if skip_verify:
        logger.warning(TLS_VERIFY_DISABLED)
        return TLSConfig(
            skip_verify=True,
            cert_file=None,
            key_file=None,
            server_name=None,
            verify_context=_insecure_context(),
        )

    context = _client_cert_context(cert_file or "", key_file or "")
    config = TLSConfig(
        skip_verify=False,
        cert_file=Path(cert_file) if cert_file else None,
        key_file=Path(key_file) if key_file else None,
        server_name=server_name or None,
        verify_context=context,
    )
    logger.debug(TLS_CLIENT_CERT_LOADED, extra=config.as_dict())
    return config
