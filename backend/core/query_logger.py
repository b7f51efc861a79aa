# backend/core/query_logger.py

import logging
import time
from typing import Any, Dict

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine

from core.config import get_settings

logger = logging.getLogger("sqlalchemy.engine")
query_logger = logging.getLogger("query_performance")


class QueryLogger:
    """SQL query statistics and slow-query warnings"""

    def __init__(self, slow_query_threshold: float = 1.0, log_statements: bool = False):
        self.slow_query_threshold = slow_query_threshold
        self.log_statements = log_statements
        self.stats: Dict[str, Any] = {}
        self.reset_stats()

    def reset_stats(self):
        """Reset query statistics"""
        self.stats = {
            "total_queries": 0,
            "slow_queries": 0,
            "total_time": 0.0,
        }

    def record(self, statement: str, elapsed: float):
        self.stats["total_queries"] += 1
        self.stats["total_time"] += elapsed

        if elapsed > self.slow_query_threshold:
            self.stats["slow_queries"] += 1
            query_logger.warning(
                "SLOW QUERY (%.3fs): %s", elapsed, statement[:200]
            )
        elif self.log_statements:
            logger.debug("Query complete in %.3fs: %s", elapsed, statement[:200])


def setup_query_logging(engine) -> QueryLogger:
    """
    Attach timing listeners to an engine.

    Args:
        engine: SQLAlchemy engine or AsyncEngine

    Returns:
        The QueryLogger collecting statistics for this engine
    """
    settings = get_settings()
    tracker = QueryLogger(
        slow_query_threshold=settings.slow_query_threshold_seconds,
        log_statements=settings.log_sql_queries,
    )

    sync_engine = engine.sync_engine if isinstance(engine, AsyncEngine) else engine

    @event.listens_for(sync_engine, "before_cursor_execute")
    def before_cursor_execute(conn, cursor, statement, parameters, context, executemany):
        conn.info.setdefault("query_start_time", []).append(time.perf_counter())

    @event.listens_for(sync_engine, "after_cursor_execute")
    def after_cursor_execute(conn, cursor, statement, parameters, context, executemany):
        started = conn.info["query_start_time"].pop(-1)
        tracker.record(statement, time.perf_counter() - started)

    return tracker
