"""
SeedMix Logging Configuration

Structured logging for the SeedMix service:
- structlog on top of stdlib logging
- Console output for development
- Optional rotating files (all events and errors only)
- Request-scoped context via contextvars
"""

import logging
import logging.handlers
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Any, Optional

import structlog
from structlog.contextvars import bind_contextvars, clear_contextvars


class SeedMixLogger:
    """
    Centralized logging configuration for SeedMix.

    Provides structured logging with:
    - File rotation by size when a log directory is configured
    - Quieter levels for chatty third-party libraries
    - Console output for development
    """

    def __init__(
        self,
        log_dir: Optional[str] = None,
        log_level: str = "INFO",
        enable_console: bool = True,
        max_file_size: int = 10 * 1024 * 1024,  # 10MB
        backup_count: int = 5
    ):
        """
        Initialize the logging system.

        Args:
            log_dir: Directory to store log files (None for console only)
            log_level: Default log level
            enable_console: Whether to enable console logging
            max_file_size: Maximum size per log file before rotation
            backup_count: Number of backup files to keep
        """
        self.log_dir = Path(log_dir) if log_dir else None
        self.log_level = getattr(logging, log_level.upper(), logging.INFO)
        self.enable_console = enable_console
        self.max_file_size = max_file_size
        self.backup_count = backup_count

        if self.log_dir is not None:
            self.log_dir.mkdir(parents=True, exist_ok=True)

        self._setup_logging()

    def _setup_logging(self):
        """Configure the complete logging system."""
        logging.getLogger().handlers.clear()

        self._configure_structlog()

        if self.log_dir is not None:
            self._setup_file_handlers()

        if self.enable_console:
            self._setup_console_handler()

        self._configure_external_loggers()

        logging.getLogger().setLevel(self.log_level)

    def _configure_structlog(self):
        """Configure structlog for structured logging."""
        shared_processors = [
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="ISO"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
        ]

        structlog.configure(
            processors=shared_processors + [
                structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
            ],
            context_class=dict,
            logger_factory=structlog.stdlib.LoggerFactory(),
            wrapper_class=structlog.stdlib.BoundLogger,
            cache_logger_on_first_use=True,
        )

    def _setup_file_handlers(self):
        """Setup rotating file handlers: everything, and errors only."""
        main_handler = self._create_rotating_file_handler(
            filename="seedmix.log",
            level=self.log_level
        )
        error_handler = self._create_rotating_file_handler(
            filename="errors.log",
            level=logging.ERROR
        )

        root_logger = logging.getLogger()
        for handler in [main_handler, error_handler]:
            root_logger.addHandler(handler)

    def _create_rotating_file_handler(
        self,
        filename: str,
        level: int
    ) -> logging.handlers.RotatingFileHandler:
        handler = logging.handlers.RotatingFileHandler(
            filename=self.log_dir / filename,
            maxBytes=self.max_file_size,
            backupCount=self.backup_count,
            encoding='utf-8'
        )
        handler.setLevel(level)
        handler.setFormatter(structlog.stdlib.ProcessorFormatter(
            processor=structlog.dev.ConsoleRenderer(colors=False),
        ))
        return handler

    def _setup_console_handler(self):
        """Setup console handler for development."""
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(self.log_level)
        console_handler.setFormatter(structlog.stdlib.ProcessorFormatter(
            processor=structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty()),
        ))
        logging.getLogger().addHandler(console_handler)

    def _configure_external_loggers(self):
        """Reduce noise from HTTP libraries unless debugging."""
        if self.log_level == logging.DEBUG:
            return

        for ext_module in ["aiohttp", "aiohttp.access", "httpx", "uvicorn.access"]:
            logging.getLogger(ext_module).setLevel(logging.WARNING)

    def get_logger(self, name: str) -> structlog.BoundLogger:
        """Get a structured logger for a specific component."""
        return structlog.get_logger(name)

    def set_request_context(self, request_id: str, client_ip: Optional[str] = None):
        """Set context for the current request."""
        clear_contextvars()
        bind_contextvars(
            request_id=request_id,
            client_ip=client_ip,
            timestamp=datetime.now(timezone.utc).isoformat()
        )

    def log_api_request(
        self,
        method: str,
        url: str,
        status_code: int,
        duration: float,
        **kwargs
    ):
        """Log API request details."""
        self.get_logger("api").info(
            "api_request",
            method=method,
            url=url,
            status_code=status_code,
            duration_seconds=duration,
            **kwargs
        )

    def log_error(self, error: Exception, context: Dict[str, Any], **kwargs):
        """Log errors with full context."""
        self.get_logger("errors").error(
            "error_occurred",
            error_type=type(error).__name__,
            error_message=str(error),
            context=context,
            **kwargs
        )


# Global logger instance
_logger_instance: Optional[SeedMixLogger] = None


def setup_logging(
    log_dir: Optional[str] = None,
    log_level: str = "INFO",
    enable_console: bool = True,
    **kwargs
) -> SeedMixLogger:
    """
    Setup the global logging configuration.

    Args:
        log_dir: Directory to store log files (None for console only)
        log_level: Default log level
        enable_console: Whether to enable console logging
        **kwargs: Additional arguments for SeedMixLogger

    Returns:
        Configured logger instance
    """
    global _logger_instance

    _logger_instance = SeedMixLogger(
        log_dir=log_dir,
        log_level=log_level,
        enable_console=enable_console,
        **kwargs
    )

    return _logger_instance


def get_logger(name: str) -> structlog.BoundLogger:
    """
    Get a logger for a specific component.

    Falls back to structlog's default configuration when logging has not
    been set up (e.g. in library use and tests).
    """
    if _logger_instance is None:
        return structlog.get_logger(name)
    return _logger_instance.get_logger(name)


def log_api_request(method: str, url: str, status_code: int, duration: float, **kwargs):
    """Log API request details."""
    if _logger_instance:
        _logger_instance.log_api_request(method, url, status_code, duration, **kwargs)


def log_error(error: Exception, context: Dict[str, Any], **kwargs):
    """Log errors with full context, even before logging is set up."""
    if _logger_instance:
        _logger_instance.log_error(error, context, **kwargs)
    else:
        structlog.get_logger("errors").error(
            "error_occurred",
            error_type=type(error).__name__,
            error_message=str(error),
            context=context,
            **kwargs
        )


def set_request_context(request_id: str, client_ip: Optional[str] = None):
    """Set context for the current request."""
    if _logger_instance:
        _logger_instance.set_request_context(request_id, client_ip)
    else:
        clear_contextvars()
        bind_contextvars(request_id=request_id, client_ip=client_ip)
