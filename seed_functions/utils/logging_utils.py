import contextvars
import json
import logging
import uuid
import inspect
import os
from datetime import datetime, timezone
from functools import wraps

# Configure the standard logger
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger('seed-functions')

SENSITIVE_FIELDS = ['password', 'token', 'key', 'secret', 'auth']


def setup_logging(log_level='INFO', cloud_logging=False):
    """
    Configure the log level and, when running on Cloud Functions, route the
    standard logger through GCP Cloud Logging.

    Returns True when Cloud Logging was installed.
    """
    level = getattr(logging, str(log_level).upper(), logging.INFO)
    logger.setLevel(level)

    if not cloud_logging:
        return False

    try:
        from google.cloud import logging as cloud_logging_lib
        client = cloud_logging_lib.Client()
        client.setup_logging(log_level=level)
        return True
    except Exception as e:
        logger.warning(f"GCP Cloud Logging could not be initialized ({e}). Using standard logging.")
        return False


def generate_request_id():
    """Generate a unique request ID for tracing."""
    return str(uuid.uuid4())


class StructuredLogger:
    """Structured logger that formats logs consistently."""

    def __init__(self, service_name):
        self.service_name = service_name
        # One value per thread / asyncio task
        self._request_id = contextvars.ContextVar(f"{service_name}_request_id", default=None)

    @property
    def request_id(self):
        return self._request_id.get()

    def set_context(self, request_id=None):
        """Set the current request context."""
        self._request_id.set(request_id or generate_request_id())
        return self

    def _format_log(self, message, additional_data=None):
        """Format log message as structured data."""
        caller_frame = inspect.currentframe().f_back.f_back
        function_name = caller_frame.f_code.co_name
        file_name = os.path.basename(caller_frame.f_code.co_filename)

        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "service": self.service_name,
            "request_id": self.request_id,
            "location": f"{file_name}:{function_name}",
            "message": message
        }

        if additional_data:
            log_data["data"] = sanitize_data(additional_data)

        return log_data

    def debug(self, message, data=None):
        """Log a debug message."""
        log_data = self._format_log(message, data)
        logger.debug(json.dumps(log_data, default=str))
        return log_data

    def info(self, message, data=None):
        """Log an info message."""
        log_data = self._format_log(message, data)
        logger.info(json.dumps(log_data, default=str))
        return log_data

    def warning(self, message, data=None):
        """Log a warning message."""
        log_data = self._format_log(message, data)
        logger.warning(json.dumps(log_data, default=str))
        return log_data

    def error(self, message, data=None, exc_info=None):
        """Log an error message."""
        log_data = self._format_log(message, data)
        logger.error(json.dumps(log_data, default=str), exc_info=exc_info)
        return log_data


def sanitize_data(data):
    """Remove sensitive fields from data before logging."""
    if not isinstance(data, dict):
        return data

    sanitized = {}
    for key, value in data.items():
        if any(sensitive in str(key).lower() for sensitive in SENSITIVE_FIELDS):
            sanitized[key] = "[REDACTED]"
        elif isinstance(value, dict):
            sanitized[key] = sanitize_data(value)
        else:
            sanitized[key] = value

    return sanitized


def create_logger(service_name):
    """Create a structured logger for a service."""
    return StructuredLogger(service_name)


def log_function_call(log):
    """Decorator to log HTTP function entries and exits."""
    def decorator(func):
        @wraps(func)
        def wrapper(request, *args, **kwargs):
            log.set_context(request_id=generate_request_id())

            log.info(f"Function {func.__name__} called", {
                "method": getattr(request, 'method', None),
                "path": getattr(request, 'path', None),
                "args": request.args.to_dict() if hasattr(request, 'args') else {}
            })

            try:
                result = func(request, *args, **kwargs)

                if isinstance(result, tuple) and len(result) >= 2 and isinstance(result[1], int):
                    status_code = result[1]
                    status_text = "success" if 200 <= status_code < 300 else "error"
                    log.info(f"Function {func.__name__} completed with status {status_code}", {
                        "status": status_text,
                        "status_code": status_code
                    })
                else:
                    log.info(f"Function {func.__name__} completed successfully")

                return result

            except Exception as e:
                log.error(f"Function {func.__name__} failed: {str(e)}", exc_info=True)
                raise

        return wrapper
    return decorator
