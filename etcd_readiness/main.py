"""Main module entrypoint for the readiness signal and health relay commands.

`signal` waits for etcd to report healthy, then signals CloudFormation SUCCESS
for the resource owning this instance. `health-proxy` serves the etcd health
endpoint locally without TLS.
"""

from __future__ import annotations

import argparse
import logging
import os
from typing import Final

import uvicorn

from etcd_readiness.adapters import TlsConfigurationError
from etcd_readiness.bootstrap import (
    bootstrap_create_etcd_client,
    bootstrap_create_health_relay_application,
    bootstrap_create_readiness_orchestrator,
)
from etcd_readiness.config import AppSettings, SettingsLoadError, config_load_settings
from etcd_readiness.domain import TlsCredentials

logger = logging.getLogger(__name__)

EXIT_SUCCESS: Final[int] = 0
EXIT_CONFIGURATION: Final[int] = 3
EXIT_INTERRUPTED: Final[int] = 130
STAGE_EXIT_CODES: Final[dict[str, int]] = {
    "tls": EXIT_CONFIGURATION,
    "health": 4,
    "identity": 5,
    "locate": 6,
    "signal": 7,
}


def main_existing_file(value: str) -> str:
    """Validate that an argument names an existing regular file.

    Args:
        value: Raw argument value.

    Returns:
        str: The unchanged path.

    Raises:
        argparse.ArgumentTypeError: Raised when the path is missing or not a file.
    """

    if not os.path.exists(value):
        raise argparse.ArgumentTypeError(f"File '{value}' does not exist")
    if not os.path.isfile(value):
        raise argparse.ArgumentTypeError(f"'{value}' is not a file")
    return value


def main_port(value: str) -> int:
    """Validate that an argument parses as an unsigned 16-bit integer.

    Args:
        value: Raw argument value.

    Returns:
        int: Parsed port.

    Raises:
        argparse.ArgumentTypeError: Raised when the value is not in 0..65535.
    """

    if not (value.isascii() and value.isdigit()):
        raise argparse.ArgumentTypeError(f"invalid port '{value}'")
    port = int(value)
    if port > 65535:
        raise argparse.ArgumentTypeError(f"port '{value}' is out of range 0..65535")
    return port


def main_build_argument_parser() -> argparse.ArgumentParser:
    """Build the command-line parser.

    Returns:
        argparse.ArgumentParser: Parser for `signal` and `health-proxy` commands.
    """

    argument_parser = argparse.ArgumentParser(
        prog="etcd-readiness",
        description="Notifies CloudFormation of etcd readiness and proxies the etcd health endpoint",
    )
    argument_parser.add_argument(
        "command",
        choices=("signal", "health-proxy"),
        help="`signal` waits for etcd then signals CloudFormation, `health-proxy` serves etcd health locally",
        type=str,
    )
    argument_parser.add_argument("server", metavar="SERVER", help="The etcd server URL", type=str)
    argument_parser.add_argument(
        "--ca", required=True, metavar="FILE", type=main_existing_file, help="CA certificate for etcd TLS"
    )
    argument_parser.add_argument(
        "--cert", required=True, metavar="FILE", type=main_existing_file, help="Client certificate for etcd TLS"
    )
    argument_parser.add_argument(
        "--key", required=True, metavar="FILE", type=main_existing_file, help="Client private key for etcd TLS"
    )
    argument_parser.add_argument(
        "-p", "--port", metavar="PORT", type=main_port, help="Port the health proxy listens on"
    )
    return argument_parser


def main_configure_logging(settings: AppSettings) -> None:
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def main_run_signal(server_url: str, tls_credentials: TlsCredentials, settings: AppSettings) -> int:
    """Run the readiness signal workflow.

    Args:
        server_url: etcd client URL.
        tls_credentials: TLS material paths.
        settings: Validated runtime settings.

    Returns:
        int: Process exit code.
    """

    with bootstrap_create_etcd_client(tls_credentials, settings) as etcd_client:
        orchestrator = bootstrap_create_readiness_orchestrator(
            server_url=server_url,
            etcd_client=etcd_client,
            settings=settings,
        )
        execution_result = orchestrator.job_execute(job_name="readiness_signal")

    if execution_result.status != "success":
        print(f"Oh no: {execution_result.failed_stage} stage failed: {execution_result.error_message}")
        return STAGE_EXIT_CODES.get(execution_result.failed_stage or "", 1)

    print("We're good! etcd is healthy and CloudFormation has been signalled.")
    return EXIT_SUCCESS


def main_run_health_proxy(
    server_url: str,
    tls_credentials: TlsCredentials,
    port: int,
    settings: AppSettings,
) -> int:
    """Serve the health relay until interrupted.

    Args:
        server_url: etcd client URL.
        tls_credentials: TLS material paths.
        port: Listen port.
        settings: Validated runtime settings.

    Returns:
        int: Process exit code.
    """

    with bootstrap_create_etcd_client(tls_credentials, settings) as etcd_client:
        application = bootstrap_create_health_relay_application(server_url=server_url, etcd_client=etcd_client)
        uvicorn.run(application, host=settings.relay_host, port=port, log_level=settings.log_level.lower())
    return EXIT_SUCCESS


def main(argv: list[str] | None = None) -> int:
    """Run the selected command with validated configuration.

    Args:
        argv: Optional argument list; defaults to `sys.argv[1:]`.

    Returns:
        int: Process exit code (0 success, 2 bad arguments, 3 configuration/TLS,
        4 health, 5 identity, 6 locate, 7 signal, 130 interrupted).
    """

    argument_parser = main_build_argument_parser()
    parsed_arguments = argument_parser.parse_args(argv)
    if parsed_arguments.command == "health-proxy" and parsed_arguments.port is None:
        argument_parser.error("--port is required for `health-proxy`")

    try:
        settings = config_load_settings()
    except SettingsLoadError as error:
        print(f"Oh no: {error}")
        return EXIT_CONFIGURATION

    main_configure_logging(settings)
    tls_credentials = TlsCredentials(
        ca_file=parsed_arguments.ca,
        cert_file=parsed_arguments.cert,
        key_file=parsed_arguments.key,
    )

    try:
        if parsed_arguments.command == "health-proxy":
            return main_run_health_proxy(
                server_url=parsed_arguments.server,
                tls_credentials=tls_credentials,
                port=parsed_arguments.port,
                settings=settings,
            )
        return main_run_signal(
            server_url=parsed_arguments.server,
            tls_credentials=tls_credentials,
            settings=settings,
        )
    except TlsConfigurationError as error:
        print(f"Oh no: {error}")
        return EXIT_CONFIGURATION
    except KeyboardInterrupt:
        print("Interrupted")
        return EXIT_INTERRUPTED


if __name__ == "__main__":
    raise SystemExit(main())
