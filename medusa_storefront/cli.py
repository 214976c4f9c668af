"""CLI entry point for the Medusa storefront."""

import argparse
import asyncio
import os
import sys
from typing import Optional, Sequence

# Flags that are forwarded to StorefrontConfig.from_env through the environment,
# so a reloading HTTP worker process sees them too.
ENV_FLAGS = {
    "backend_url": "MEDUSA_BACKEND_URL",
    "publishable_key": "MEDUSA_PUBLISHABLE_KEY",
    "region_id": "MEDUSA_REGION_ID",
    "storage_dir": "STOREFRONT_STORAGE_DIR",
    "log_level": "LOG_LEVEL",
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="medusa-storefront",
        description="Product cache and cart synchronizer for a Medusa store backend",
    )
    parser.add_argument(
        "--mode",
        choices=["stdio", "http"],
        default="stdio",
        help="stdio exposes the storefront tools to an MCP client; http serves the catalog and cart REST API",
    )
    parser.add_argument("--host", default="0.0.0.0", help="HTTP bind address (default: 0.0.0.0)")
    parser.add_argument("--port", type=int, default=8000, help="HTTP port (default: 8000)")
    parser.add_argument("--reload", action="store_true", help="Restart the HTTP server on code changes")

    backend = parser.add_argument_group("store backend")
    backend.add_argument("--backend-url", help="Medusa backend URL (overrides MEDUSA_BACKEND_URL)")
    backend.add_argument("--publishable-key", help="Publishable API key (overrides MEDUSA_PUBLISHABLE_KEY)")
    backend.add_argument("--region-id", help="Region used for new carts and prices (overrides MEDUSA_REGION_ID)")
    backend.add_argument(
        "--storage-dir",
        help="Where the cart and product cache are kept (overrides STOREFRONT_STORAGE_DIR)",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level (overrides LOG_LEVEL)",
    )
    return parser


def apply_env_overrides(args: argparse.Namespace, environ=None) -> None:
    """Export the backend flags that were given on the command line."""
    if environ is None:
        environ = os.environ
    for attr, name in ENV_FLAGS.items():
        value = getattr(args, attr)
        if value is not None:
            environ[name] = value


def main(argv: Optional[Sequence[str]] = None) -> None:
    """CLI entry point."""
    args = build_parser().parse_args(argv)
    apply_env_overrides(args)

    if args.mode == "http":
        from .http_server import run_http_server
        run_http_server(host=args.host, port=args.port, reload=args.reload)
        return

    from .server import main as server_main
    try:
        asyncio.run(server_main())
    except KeyboardInterrupt:
        print("\nShutting down...", file=sys.stderr)
        sys.exit(0)


if __name__ == "__main__":
    main()
