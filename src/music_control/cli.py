"""
Music Control - command line entry point

Runs the HTTP API. Command line options override config.toml and the
environment.
"""

import argparse
import os
import sys
from pathlib import Path

from loguru import logger

from music_control.core.config import load_config
from music_control.core.output import setup_loguru

# Command line option -> environment variable read by load_config()
OPTION_ENV = {
    "redis_url": "REDIS_URL",
    "music_root": "MUSIC_ROOT",
    "media_dir": "MEDIA_DIR",
    "bind": "BIND",
    "password": "MUSIC_CONTROL_PASSWORD",
    "log_level": "LOG_LEVEL",
}


def apply_overrides(args: argparse.Namespace) -> None:
    """Export command line options so the web app's config sees them too."""
    if args.config:
        os.environ["MUSIC_CONTROL_CONFIG"] = str(Path(args.config).expanduser())
    for option, env_name in OPTION_ENV.items():
        value = getattr(args, option, None)
        if value:
            os.environ[env_name] = value


def run_server() -> int:
    """Validate configuration and serve the API until interrupted.

    Returns:
        Exit code (0 for success, 1 for failure)
    """
    try:
        config = load_config()
        config.validate()
    except ValueError as e:
        print(f"error: {e}.", file=sys.stderr)
        return 1

    setup_loguru(config.logging)

    import uvicorn

    logger.info(f"Serving Music Control on {config.web.bind}")
    if not config.web.password:
        logger.warning("No password configured; the API is open to anyone")
    uvicorn.run(
        "web.backend.main:app",
        host=config.web.host,
        port=config.web.port,
        log_level=config.logging.level.lower(),
    )
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='music-control',
        description='Per-stream playback queue and track selection service'
    )
    subparsers = parser.add_subparsers(dest='subcommand')

    serve_parser = subparsers.add_parser('serve', help='Run the HTTP API')
    serve_parser.add_argument('--config', help='Path to config.toml')
    serve_parser.add_argument('--redis-url', help='The URL of the redis server')
    serve_parser.add_argument('--music-root', help='The root URL to access music at')
    serve_parser.add_argument('--media-dir', help='Directory uploaded tracks are stored in')
    serve_parser.add_argument('--bind', help='The address:port to bind the server to')
    serve_parser.add_argument('--password', help='The password to require for HTTP Basic Auth')
    serve_parser.add_argument('--log-level', help='DEBUG, INFO, WARNING or ERROR')
    return parser


def main() -> None:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args()

    if args.subcommand != 'serve':
        parser.print_help()
        sys.exit(1)

    apply_overrides(args)
    sys.exit(run_server())


if __name__ == "__main__":
    main()
