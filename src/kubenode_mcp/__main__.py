"""Entry point for the kubenode-mcp server."""

import argparse
import logging
import sys
from typing import Any

from kubenode_mcp import __version__
from kubenode_mcp.config import (
    AuthMode,
    KubeNodeConfig,
    LogLevel,
    TransportMode,
)


def setup_logging(level: LogLevel) -> None:
    """Configure logging for the server."""
    logging.basicConfig(
        level=level.value,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)],
    )


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="kubenode-mcp",
        description="MCP server for Kubernetes worker nodes",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    # Transport options
    parser.add_argument(
        "--transport",
        choices=[mode.value for mode in TransportMode],
        default=None,
        help="Transport mode (default: from config or stdio)",
    )
    parser.add_argument("--host", default=None, help="Host to bind HTTP server to")
    parser.add_argument("--port", type=int, default=None, help="Port to bind HTTP server to")

    # Auth options
    parser.add_argument(
        "--auth-mode",
        choices=[mode.value for mode in AuthMode],
        default=None,
        help="Authentication mode (default: auto)",
    )
    parser.add_argument("--kubeconfig", default=None, help="Path to kubeconfig file")
    parser.add_argument("--context", default=None, help="Kubeconfig context to use")

    # Cluster options
    parser.add_argument("--cluster-name", default=None, help="Name of the operated cluster")
    parser.add_argument(
        "--machine-namespace", default=None, help="Namespace holding Machine resources"
    )

    # Safety options
    parser.add_argument(
        "--read-only",
        action="store_true",
        help="Run in read-only mode (disable all write operations)",
    )
    parser.add_argument(
        "--enable-dangerous",
        action="store_true",
        help="Enable dangerous operations like delete",
    )

    # Logging
    parser.add_argument(
        "--log-level",
        choices=[level.value for level in LogLevel],
        default=None,
        help="Logging level (default: INFO)",
    )

    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> KubeNodeConfig:
    """Build config from args, falling back to environment and defaults."""
    config_kwargs: dict[str, Any] = {}

    if args.transport:
        config_kwargs["transport"] = TransportMode(args.transport)
    if args.host:
        config_kwargs["host"] = args.host
    if args.port:
        config_kwargs["port"] = args.port
    if args.auth_mode:
        config_kwargs["auth_mode"] = AuthMode(args.auth_mode)
    if args.kubeconfig:
        config_kwargs["kubeconfig_path"] = args.kubeconfig
    if args.context:
        config_kwargs["kubeconfig_context"] = args.context
    if args.cluster_name:
        config_kwargs["cluster_name"] = args.cluster_name
    if args.machine_namespace:
        config_kwargs["machine_namespace"] = args.machine_namespace
    if args.read_only:
        config_kwargs["read_only_mode"] = True
    if args.enable_dangerous:
        config_kwargs["enable_dangerous_operations"] = True
    if args.log_level:
        config_kwargs["log_level"] = LogLevel(args.log_level)

    return KubeNodeConfig(**config_kwargs)


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    config = build_config(parse_args(argv))

    setup_logging(config.log_level)

    logger = logging.getLogger(__name__)
    logger.info(f"Starting kubenode-mcp server v{__version__}")

    try:
        warnings = config.validate_auth_config()
        for warning in warnings:
            logger.warning(warning)
    except ValueError as e:
        logger.error(f"Configuration error: {e}")
        return 1

    from kubenode_mcp.server import create_server

    mcp = create_server(config)

    if config.transport == TransportMode.STDIO:
        logger.info("Running with stdio transport")
    else:
        logger.info(
            f"Running with {config.transport.value} transport on {config.host}:{config.port}"
        )
    mcp.run(transport=config.transport.value)

    return 0


if __name__ == "__main__":
    sys.exit(main())
