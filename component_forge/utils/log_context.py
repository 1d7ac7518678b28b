"""Correlation ids for log lines belonging to one generation run."""

import logging
import uuid
from typing import Optional, Union

LoggerLike = Union[logging.Logger, logging.LoggerAdapter]


def new_correlation_id() -> str:
    return uuid.uuid4().hex[:12]


class CorrelationAdapter(logging.LoggerAdapter):
    """Prefixes every message with ``[<correlation id>]``."""

    def process(self, msg, kwargs):
        return f"[{self.extra['correlation_id']}] {msg}", kwargs


def with_correlation(logger: LoggerLike, correlation_id: Optional[str] = None) -> CorrelationAdapter:
    """Wrap ``logger`` so its messages carry a correlation id."""
    return CorrelationAdapter(logger, {"correlation_id": correlation_id or new_correlation_id()})
