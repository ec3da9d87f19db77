"""Structured logging setup with dual output"""

import structlog
import logging
import sys
from pathlib import Path


def setup_logging(
    mode: str = "production",
    terminal_level: str = "ERROR",
    file_level: str = "DEBUG",
    log_file: str = "logs/whisper_local.log"
):
    """
    Setup dual logging:
    - Terminal: minimal output (ERROR+ in production, DEBUG+ in dev)
    - File: complete logs (DEBUG+)
    """
    Path(log_file).parent.mkdir(parents=True, exist_ok=True)

    if mode == "development":
        terminal_level = "DEBUG"
        use_colors = True
    else:
        use_colors = False

    terminal_log_level = getattr(logging, terminal_level.upper(), logging.ERROR)
    file_log_level = getattr(logging, file_level.upper(), logging.DEBUG)

    # ===== FILE HANDLER =====
    file_handler = logging.FileHandler(log_file)
    file_handler.setLevel(file_log_level)
    file_formatter = logging.Formatter(
        '%(asctime)s [%(levelname)8s] %(name)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )
    file_handler.setFormatter(file_formatter)

    # ===== CONSOLE HANDLER =====
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(terminal_log_level)
    console_handler.setFormatter(logging.Formatter('%(message)s'))

    # ===== ROOT LOGGER =====
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)
    root_logger.handlers.clear()
    root_logger.addHandler(file_handler)
    root_logger.addHandler(console_handler)

    # ===== STRUCTLOG =====
    if mode == "development":
        structlog.configure(
            processors=[
                structlog.processors.TimeStamper(fmt="%Y-%m-%d %H:%M:%S"),
                structlog.processors.add_log_level,
                structlog.dev.ConsoleRenderer(colors=use_colors)
            ],
            wrapper_class=structlog.make_filtering_bound_logger(logging.DEBUG),
            context_class=dict,
            logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
            cache_logger_on_first_use=True,
        )
    else:
        # Production: everything goes through stdlib handlers, file gets it all
        structlog.configure(
            processors=[
                structlog.processors.TimeStamper(fmt="iso"),
                structlog.stdlib.add_log_level,
                structlog.processors.StackInfoRenderer(),
                structlog.processors.format_exc_info,
                structlog.processors.KeyValueRenderer(
                    key_order=["timestamp", "level", "event"]
                ),
            ],
            logger_factory=structlog.stdlib.LoggerFactory(),
            wrapper_class=structlog.make_filtering_bound_logger(logging.INFO),
            cache_logger_on_first_use=True,
        )

    for logger_name in ["httpx", "httpcore", "docker", "urllib3"]:
        logging.getLogger(logger_name).setLevel(logging.ERROR)

    return root_logger


def setup_production_logging(log_file: str = "logs/whisper_local.log"):
    """Production mode - quiet terminal, errors only"""
    return setup_logging(mode="production", log_file=log_file)


def setup_dev_logging(log_file: str = "logs/whisper_local.log"):
    """Development mode - verbose terminal"""
    return setup_logging(mode="development", log_file=log_file)
