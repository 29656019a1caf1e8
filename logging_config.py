"""
Logging configuration with optional structured JSON output and masking of contact data
"""
import json
import logging
import re
import sys
from typing import Dict, Optional

from config import Settings, get_settings


class SensitiveDataFilter(logging.Filter):
    """Mask email addresses in log messages and their args"""

    EMAIL_PATTERN = re.compile(r'([A-Za-z0-9._%+-])[A-Za-z0-9._%+-]*@([A-Za-z0-9.-]+)')

    def __init__(self, enabled: bool = True):
        super().__init__()
        self.enabled = enabled

    def _mask(self, value: str) -> str:
        return self.EMAIL_PATTERN.sub(r'\1***@\2', value)

    def filter(self, record: logging.LogRecord) -> bool:
        if not self.enabled:
            return True

        if isinstance(record.msg, str):
            record.msg = self._mask(record.msg)

        if record.args and isinstance(record.args, tuple):
            record.args = tuple(
                self._mask(arg) if isinstance(arg, str) else arg
                for arg in record.args
            )

        return True


class ContextualFormatter(logging.Formatter):
    """JSON formatter that keeps fields passed through extra="""

    _RESERVED = {
        'name', 'msg', 'args', 'created', 'filename', 'funcName', 'levelname',
        'levelno', 'lineno', 'module', 'msecs', 'message', 'pathname', 'process',
        'processName', 'relativeCreated', 'thread', 'threadName', 'exc_info',
        'exc_text', 'stack_info', 'taskName',
    }

    def format(self, record: logging.LogRecord) -> str:
        log_dict = {
            'timestamp': self.formatTime(record, self.datefmt),
            'level': record.levelname,
            'logger': record.name,
            'module': record.module,
            'function': record.funcName,
            'line': record.lineno,
            'message': record.getMessage(),
        }

        if record.exc_info:
            log_dict['exception'] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key in self._RESERVED or key in log_dict:
                continue
            try:
                json.dumps(value)
                log_dict[key] = value
            except (TypeError, ValueError):
                log_dict[key] = str(value)

        return json.dumps(log_dict, ensure_ascii=False, default=str)


class LoggingConfig:
    """Centralized logging configuration"""

    _configured = False

    @classmethod
    def configure(cls, settings: Optional[Settings] = None, module_levels: Optional[Dict[str, str]] = None):
        """Configure logging for the application (first call wins)"""
        if cls._configured:
            return

        settings = settings or get_settings()

        levels = {
            "pymongo": "WARNING",
            "uvicorn.access": "WARNING",
            "uvicorn.error": "INFO",
            "httpx": "WARNING",
        }
        if module_levels:
            levels.update(module_levels)

        if settings.log_format.lower() == "json":
            formatter = ContextualFormatter(datefmt='%Y-%m-%d %H:%M:%S')
        else:
            formatter = logging.Formatter(
                '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            )

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(formatter)
        console_handler.addFilter(SensitiveDataFilter(enabled=not settings.log_sensitive_data))

        logging.basicConfig(
            level=getattr(logging, settings.log_level.upper()),
            handlers=[console_handler],
            force=True
        )

        for module, level in levels.items():
            logging.getLogger(module).setLevel(getattr(logging, level.upper()))

        cls._configured = True

    @classmethod
    def get_logger(cls, name: str) -> logging.Logger:
        """Get a logger for a module; handlers are installed by configure()"""
        return logging.getLogger(name)

