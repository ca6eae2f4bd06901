"""Logging configuration and setup."""

import logging
import logging.handlers
import json
from typing import Dict, Any
from datetime import datetime, timezone
from bigtable_broker.config import config


class JSONFormatter(logging.Formatter):
    """JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_entry = {
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
            'module': record.module,
            'function': record.funcName,
            'line': record.lineno
        }

        # Add extra fields if present
        if hasattr(record, 'instance_id'):
            log_entry['instance_id'] = record.instance_id
        if hasattr(record, 'operation'):
            log_entry['operation'] = record.operation
        if hasattr(record, 'user_id'):
            log_entry['user_id'] = record.user_id

        if record.exc_info:
            log_entry['exception'] = self.formatException(record.exc_info)

        return json.dumps(log_entry)


class AuditLogger:
    """Specialized logger for the provisioning audit trail."""

    def __init__(self):
        self.logger = logging.getLogger('bigtable_broker.audit')

    def log_provisioning(self, instance_id: str, operation: str,
                         user_id: str = None, details: Dict[str, Any] = None):
        """Log provisioning operations."""
        extra = {
            'instance_id': instance_id,
            'operation': operation,
            'user_id': user_id or 'system'
        }

        message = f"Provisioning operation: {operation} for instance {instance_id}"
        if details:
            message += f" - Details: {json.dumps(details, default=str)}"

        self.logger.info(message, extra=extra)


def setup_logging():
    """Set up logging configuration."""
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, config.logging.level.upper()))

    # Remove existing handlers
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(JSONFormatter())
    root_logger.addHandler(console_handler)

    if config.logging.file_path:
        file_handler = logging.handlers.RotatingFileHandler(
            config.logging.file_path,
            maxBytes=config.logging.max_file_size,
            backupCount=config.logging.backup_count
        )
        file_handler.setFormatter(JSONFormatter())
        root_logger.addHandler(file_handler)

    # Set specific logger levels
    logging.getLogger('bigtable_broker').setLevel(logging.DEBUG)
    logging.getLogger('urllib3').setLevel(logging.WARNING)
    logging.getLogger('google').setLevel(logging.WARNING)
    logging.getLogger('werkzeug').setLevel(logging.WARNING)


# Initialize audit logger
audit_logger = AuditLogger()
