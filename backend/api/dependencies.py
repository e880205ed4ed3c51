"""
Shared dependencies for the Employee Directory API.
Extracted from main.py for modular router support.
"""
import os
import logging
import logging.handlers
import threading
import traceback
from contextlib import contextmanager
from typing import Iterator, Optional

from fastapi import HTTPException
from slowapi import Limiter
from slowapi.util import get_remote_address

from dirlib.controller import DirectoryController
from dirlib.errors import CriteriaError, DuplicateFieldError
from dirlib.records import EmployeeSource
from dirlib.storage import JsonFileStore

# ── Structured JSON Logging setup ───────────────────────────────
import json as _json
from datetime import datetime as _dt, timezone as _tz

class _JsonFormatter(logging.Formatter):
    """Emit log records as single-line JSON objects."""
    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": _dt.fromtimestamp(record.created, tz=_tz.utc).strftime('%Y-%m-%dT%H:%M:%S.') + f"{int(record.msecs):03d}Z",
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            entry["exc"] = self.formatException(record.exc_info)
        return _json.dumps(entry, ensure_ascii=False)

_log_file = os.environ.get('DIR_LOG_FILE', '/tmp/employee-directory.log')
_handler = logging.handlers.RotatingFileHandler(
    _log_file, maxBytes=10 * 1024 * 1024, backupCount=3
)
_handler.setFormatter(_JsonFormatter())

_logger = logging.getLogger('dirapi')
# Log level configurable via ENV
_log_level_str = os.environ.get('DIR_LOG_LEVEL', 'INFO').upper()
_log_level = getattr(logging, _log_level_str, logging.INFO)
_logger.setLevel(_log_level)
_logger.addHandler(_handler)
_stderr_handler = logging.StreamHandler()
_stderr_handler.setFormatter(_JsonFormatter())
_logger.addHandler(_stderr_handler)

# Library modules log under "dirlib"; route them through the same handlers.
_lib_logger = logging.getLogger('dirlib')
_lib_logger.setLevel(_log_level)
_lib_logger.addHandler(_handler)
_lib_logger.addHandler(_stderr_handler)

# ── Rate Limiter ─────────────────────────────────────────────────
limiter = Limiter(key_func=get_remote_address, default_limits=["200/minute"])

# ── Directory controller ─────────────────────────────────────────
# NOTE: One controller per process, like the single page it replaces.
# Sync endpoints run in a threadpool, so access goes through _controller_lock.
_controller_lock = threading.RLock()
_controller: Optional[DirectoryController] = None
_controller_key: Optional[tuple] = None


def get_source() -> EmployeeSource:
    """Get the employee source using the current DATA_PATH from main module."""
    import api.main as _main
    return EmployeeSource(_main.DATA_PATH)


def get_store() -> JsonFileStore:
    import api.main as _main
    return JsonFileStore(_main.STATE_PATH)


def get_controller() -> DirectoryController:
    """Return the process-wide controller, rebuilding it if the paths changed."""
    global _controller, _controller_key
    import api.main as _main
    key = (_main.DATA_PATH, _main.STATE_PATH, _main.SEARCH_DELAY)
    with _controller_lock:
        if _controller is None or _controller_key != key:
            _controller = DirectoryController(
                get_source(), get_store(), search_delay=_main.SEARCH_DELAY,
            )
            _controller_key = key
            _logger.debug("Directory controller created for %s", _main.DATA_PATH)
        return _controller


def reset_controller() -> None:
    """Forget the current controller; the next request builds a fresh one."""
    global _controller, _controller_key
    with _controller_lock:
        _controller = None
        _controller_key = None


@contextmanager
def controller_session() -> Iterator[DirectoryController]:
    """Hold the controller lock for one event, loading records on first use.

    Rejected sort-criteria mutations are translated into HTTP errors; a state
    file that cannot be written becomes a sanitized 500.
    """
    with _controller_lock:
        ctrl = get_controller()
        ctrl.load()
        try:
            yield ctrl
        except DuplicateFieldError as e:
            raise HTTPException(status_code=409, detail=str(e))
        except CriteriaError as e:
            raise HTTPException(status_code=400, detail=str(e))
        except OSError as e:
            raise _sanitize_500(e, 'state store')


def _sanitize_500(e: Exception, context: str = '') -> HTTPException:
    """Log full exception, return sanitized 500."""
    _logger.error(
        "500 error context=%s type=%s msg=%s trace=%s",
        context, type(e).__name__, str(e),
        traceback.format_exc().splitlines()[-1],
    )
    return HTTPException(
        status_code=500,
        detail="Internal server error. Please try again.",
    )
