#!/usr/bin/env python3
"""
DirHunter Automation Engine
Main entry point for directory profiling and submission.

Usage:
    python main.py analyze --csv directories.csv
    python main.py submit --config config.json
    python main.py values --url https://example.com
    python main.py stats
"""

import asyncio
import json
import os
import signal
import sys
import argparse
from pathlib import Path
from typing import Optional

from loguru import logger
from pydantic import ValidationError

# Add this directory to path for imports when run as a script
sys.path.insert(0, str(Path(__file__).parent))


def setup_ssl_certificates():
    """
    Point SSL-using libraries at certifi's CA bundle.
    This fixes 'CERTIFICATE_VERIFY_FAILED' errors on macOS Python installs.
    """
    import certifi

    os.environ['SSL_CERT_FILE'] = certifi.where()
    os.environ['REQUESTS_CA_BUNDLE'] = certifi.where()
    # Also used by aiohttp/curl based clients
    os.environ['CURL_CA_BUNDLE'] = certifi.where()


# Set up SSL certificates before any imports that might use HTTPS
setup_ssl_certificates()

from orchestrator import DirHunterBot
from config import BotConfig
from errors import ConstructionFailure, NavigationFailure
from utils.helpers import get_app_data_directory
from utils.simple_logger import slog

# Global reference to bot for signal handling
_bot_instance: Optional[DirHunterBot] = None


def setup_logging(debug: bool = False):
    """Configure logging with loguru."""
    log_dir = get_app_data_directory() / "logs"

    try:
        log_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        # Fallback to temp directory if we can't create the log directory
        import tempfile
        log_dir = Path(tempfile.gettempdir()) / "dirhunter" / "logs"
        log_dir.mkdir(parents=True, exist_ok=True)
        print(f"Warning: Could not create log directory, using {log_dir}: {e}")

    # Remove default handler
    logger.remove()

    log_level = "DEBUG" if debug else "INFO"

    # Sink that flushes immediately and survives consoles without emoji support
    def stdout_sink(message):
        try:
            sys.stdout.write(message)
        except UnicodeEncodeError:
            encoding = sys.stdout.encoding or 'utf-8'
            sys.stdout.write(message.encode(encoding, errors='replace').decode(encoding, errors='replace'))
        sys.stdout.flush()

    logger.add(
        stdout_sink,
        format="{time:HH:mm:ss} | {level: <8} | {message}",
        level=log_level,
        colorize=False
    )

    # File handler
    logger.add(
        log_dir / "dirhunter_{time:YYYY-MM-DD}.log",
        format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}",
        level="DEBUG",
        rotation="1 day",
        retention="7 days",
        compression="gz"
    )

    version = os.environ.get("DIRHUNTER_VERSION", "dev")
    logger.info(f"🚀 DirHunter v{version}")


def parse_args(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="DirHunter - profile directory sites and submit to them"
    )
    parser.add_argument(
        "command",
        choices=["analyze", "submit", "values", "stats"],
        help="analyze: build site profiles; submit: fill and submit; "
             "values: derive submission values from a URL; stats: show stored results"
    )
    parser.add_argument(
        "--config",
        type=str,
        help="Path to JSON config file"
    )
    parser.add_argument(
        "--csv",
        type=str,
        help="Path to the directory list CSV"
    )
    parser.add_argument(
        "--url",
        type=str,
        help="Website URL (for the values command)"
    )
    parser.add_argument(
        "--limit",
        type=int,
        help="Process at most this many directories"
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging"
    )
    parser.add_argument(
        "--headless",
        action="store_true",
        help="Run browser in headless mode"
    )

    args = parser.parse_args(argv)
    if args.command == "values" and not args.url:
        parser.error("the values command requires --url")
    return args


def load_config(args) -> Optional[BotConfig]:
    """Load configuration from file, then apply command line overrides."""
    config_data = {}

    if args.config:
        config_path = Path(args.config)
        if not config_path.exists():
            logger.error(f"Config file not found: {config_path}")
            return None
        try:
            with open(config_path) as f:
                config_data = json.load(f)
        except json.JSONDecodeError as e:
            logger.error(f"Invalid config JSON: {e}")
            return None
        slog.detail(f"Loaded config from: {config_path}")

    settings = config_data.setdefault("settings", {})
    if args.csv:
        settings["csv_path"] = args.csv
    if args.limit is not None:
        settings["limit"] = args.limit
    if args.debug:
        settings["debug"] = True
    if args.headless:
        settings["headless"] = True

    try:
        return BotConfig(**config_data)
    except ValidationError as e:
        logger.error(f"Invalid configuration: {e}")
        return None


def handle_shutdown_signal(signum, frame):
    """Handle shutdown signals gracefully."""
    sig_name = signal.Signals(signum).name if hasattr(signal, 'Signals') else str(signum)
    slog.detail_warning(f"⏹ Received {sig_name}, initiating graceful shutdown...")

    if _bot_instance:
        _bot_instance.stop()


async def main(argv=None) -> int:
    """Main entry point. Returns the process exit status."""
    global _bot_instance

    args = parse_args(argv)
    setup_logging(debug=args.debug)

    for sig in (signal.SIGTERM, signal.SIGINT):
        try:
            signal.signal(sig, handle_shutdown_signal)
        except (ValueError, OSError):
            # Signal not available on this platform
            pass

    slog.detail("⏳ Loading configuration...")
    config = load_config(args)
    if not config:
        logger.error("Failed to load configuration. Exiting.")
        return 1

    if args.command == "submit" and config.submission is None:
        logger.error("Submission data is required: add a 'submission' block to the config file")
        return 1

    bot = DirHunterBot(config)
    _bot_instance = bot

    try:
        if args.command == "analyze":
            await bot.run_analysis()
        elif args.command == "submit":
            await bot.run_submissions()
        elif args.command == "values":
            await bot.run_value_generation(args.url)
        else:
            bot.show_stats()
    except ConstructionFailure as e:
        logger.error(f"❌ {e}")
        return 1
    except NavigationFailure as e:
        logger.error(f"❌ Could not load {e.url}: {e.cause}")
        return 1
    except asyncio.CancelledError:
        slog.detail_warning("⏹ Bot task was cancelled")
        return 1

    logger.success("✅ Done!")
    return 0


def run():
    """Console script entry point."""
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    run()
