"""Correlation-aware logging for lenient HTML parsing.

Every record emitted through :class:`CorrelationLogger` carries the component
that produced it and the correlation id of the parse it belongs to, so log
lines from concurrent parses can be told apart. The package never installs
handlers; applications decide where records go.
"""

import logging
from typing import Any, Dict, Optional

PACKAGE_LOGGER_NAME = "lenient_html"


class CorrelationLogger:
    """Wraps a stdlib logger and stamps ``component`` and ``correlation_id``.

    Caller-supplied ``extra`` keys are merged on top, so a call site may add
    counters such as ``token_count`` next to the standard fields.
    """

    def __init__(
        self,
        name: str,
        correlation_id: Optional[str] = None,
        component: Optional[str] = None
    ) -> None:
        """Bind a named logger to one parse.

        Args:
            name: Dotted module name, normally ``__name__``
            correlation_id: Id of the parse the records belong to, if any
            component: Value of the ``component`` field; defaults to the last
                part of ``name``
        """
        self.logger = logging.getLogger(name)
        self.correlation_id = correlation_id
        self.component = component or name.rsplit(".", 1)[-1]

    def is_enabled_for(self, level: int) -> bool:
        """Whether a record at ``level`` would pass the logger's threshold.

        Use it to skip building expensive ``extra`` payloads.
        """
        return self.logger.isEnabledFor(level)

    def debug(self, message: str, extra: Optional[Dict[str, Any]] = None) -> None:
        self._log(logging.DEBUG, message, extra)

    def info(self, message: str, extra: Optional[Dict[str, Any]] = None) -> None:
        self._log(logging.INFO, message, extra)

    def warning(self, message: str, extra: Optional[Dict[str, Any]] = None) -> None:
        self._log(logging.WARNING, message, extra)

    def exception(self, message: str, extra: Optional[Dict[str, Any]] = None) -> None:
        """Log at ERROR with the active exception's traceback attached."""
        self._log(logging.ERROR, message, extra, exc_info=True)

    def _log(
        self,
        level: int,
        message: str,
        extra: Optional[Dict[str, Any]],
        exc_info: bool = False
    ) -> None:
        fields: Dict[str, Any] = {
            "component": self.component,
            "correlation_id": self.correlation_id,
        }
        if extra:
            fields.update(extra)
        self.logger.log(level, message, extra=fields, exc_info=exc_info)


def get_logger(
    name: str,
    correlation_id: Optional[str] = None,
    component: Optional[str] = None
) -> CorrelationLogger:
    """Return a :class:`CorrelationLogger` for ``name`` bound to one parse."""
    return CorrelationLogger(name, correlation_id, component)


def set_package_log_level(level: str) -> None:
    """Set the threshold of the ``lenient_html`` logger and its children.

    Args:
        level: Level name such as ``"DEBUG"`` or ``"WARNING"``
    """
    logging.getLogger(PACKAGE_LOGGER_NAME).setLevel(level)
