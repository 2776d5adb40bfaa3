"""Run command implementation."""

import logging
import os
from argparse import Namespace
from pathlib import Path
from typing import Optional

from packager.exceptions import ConfigLoadError, DecodeError
from packager.loader import ConfigLoader
from packager.workflow.executor import CommandCoordinator


logger = logging.getLogger(__name__)

LOG_LEVELS = {
    'debug': logging.DEBUG,
    'info': logging.INFO,
    'warn': logging.WARNING,
    'error': logging.ERROR,
}


def configure_logging(args: Namespace) -> None:
    """Set up process-wide logging from the CLI flags."""
    log_level = LOG_LEVELS[args.log_level]
    if args.debug:
        log_level = logging.DEBUG
    elif args.quiet:
        log_level = logging.ERROR

    logging.basicConfig(
        level=log_level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )


def change_workdir(config_path: Path, workdir: Optional[str] = None) -> None:
    """
    Change the process working directory before commands run.

    Uses ``workdir`` when given, else the configuration file's directory.
    """
    target = Path(workdir) if workdir else config_path.parent
    if not target.is_dir():
        raise NotADirectoryError(f"Working directory does not exist: {target}")

    os.chdir(target)
    logger.info(f"Changed current directory to {target}")


def run_config(args: Namespace) -> int:
    """
    Load a configuration and execute its commands.

    Returns:
        0 when every command succeeded, 1 when any command failed or the
        working directory is unusable, 2 when the configuration cannot be loaded
    """
    configure_logging(args)

    config_path = Path(args.config).resolve()
    logger.info("Starting packager...")
    logger.debug(f"The config file path is: {config_path}")

    loader = ConfigLoader(use_define=not args.no_define)
    try:
        config = loader.load(config_path)
    except DecodeError as e:
        for error in e.errors:
            where = f"{error.path}: " if error.path else ""
            logger.error(f"Validation error: {where}{error.message}")
        return e.exit_code
    except ConfigLoadError as e:
        logger.error(str(e))
        return e.exit_code

    logger.info(f"Loaded {len(config.define_items)} definition(s) and {len(config.command)} command(s)")
    logger.debug(f"Configuration: {config.to_dict()}")

    if args.dry_run:
        for index, command in enumerate(config.command):
            logger.info(f"[DRY RUN] [{index + 1}/{len(config.command)}] Would {command.describe()}")
        logger.info("[DRY RUN] Configuration validation successful")
        return 0

    try:
        change_workdir(config_path, args.workdir)
    except OSError as e:
        logger.error(f"Failed to change current directory: {e}")
        return 1

    report = CommandCoordinator().execute_all(config.command)
    logger.debug(f"Execution report: {report.to_dict()}")
    return 0 if report.ok else 1
