"""
NAKAMA - Structured Tracing Logger
trace_id を自動付与する構造化ロガーと、同期処理の開始/終了を記録するデコレータ

ログ出力項目: timestamp, level, trace_id, module, message, metadata
"""
import functools
import logging
import time
from typing import Any, Callable, Dict, Optional

import structlog

from nakama.core.config import Settings, get_settings
from nakama.core.trace_context import get_trace_id


def configure_logging(settings: Optional[Settings] = None) -> None:
    """structlog の出力設定を行う（アプリ起動時に一度だけ呼ぶ）"""
    settings = settings or get_settings()
    level = logging.getLevelName(settings.log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO
    logging.basicConfig(format="%(message)s", level=level)

    renderer = (
        structlog.processors.JSONRenderer(ensure_ascii=False)
        if settings.log_json
        else structlog.dev.ConsoleRenderer()
    )
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_traced_logger(module: str) -> "TracedLogger":
    """モジュール名を紐づけた TracedLogger を取得"""
    return TracedLogger(module)


class TracedLogger:
    """
    trace_id を自動注入する構造化ロガー

    structlog をラップし、全てのログ出力に trace_id と module を付与する。
    """

    def __init__(self, module: str):
        self._module = module
        self._logger = structlog.get_logger(f"nakama.{module}")

    def _build_event(self, metadata: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        event: Dict[str, Any] = {
            "trace_id": get_trace_id(),
            "module": self._module,
        }
        if metadata:
            event["metadata"] = metadata
        return event

    def log(
        self,
        level: int,
        message: str,
        metadata: Optional[Dict[str, Any]] = None,
        **kwargs: Any,
    ) -> None:
        self._logger.log(level, message, **self._build_event(metadata), **kwargs)

    def debug(self, message: str, metadata: Optional[Dict[str, Any]] = None, **kwargs: Any) -> None:
        self.log(logging.DEBUG, message, metadata, **kwargs)

    def info(self, message: str, metadata: Optional[Dict[str, Any]] = None, **kwargs: Any) -> None:
        self.log(logging.INFO, message, metadata, **kwargs)

    def warning(self, message: str, metadata: Optional[Dict[str, Any]] = None, **kwargs: Any) -> None:
        self.log(logging.WARNING, message, metadata, **kwargs)

    def error(self, message: str, metadata: Optional[Dict[str, Any]] = None, **kwargs: Any) -> None:
        self.log(logging.ERROR, message, metadata, **kwargs)

    def exception(
        self,
        message: str,
        metadata: Optional[Dict[str, Any]] = None,
        **kwargs: Any,
    ) -> None:
        """ERROR レベルでログ出力し、現在の例外のスタックトレースを含める"""
        self._logger.exception(message, **self._build_event(metadata), **kwargs)


def trace_execution(
    module: str,
    name: Optional[str] = None,
    level: int = logging.DEBUG,
):
    """
    同期関数の開始/終了を自動ログするデコレータ

    使い方:
        @trace_execution("Orchestrator", "recompute")
        def _recompute(self):
            ...

    ログ出力:
        [DEBUG] [trace_id] [Orchestrator] recompute started
        [DEBUG] [trace_id] [Orchestrator] recompute completed metadata={duration_ms=0.4}

    失敗時は level に関わらず ERROR で記録し、例外はそのまま送出する。
    """
    def decorator(func: Callable) -> Callable:
        operation = name or func.__name__
        traced_logger = get_traced_logger(module)

        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            traced_logger.log(level, f"{operation} started")
            start = time.monotonic()
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                duration_ms = round((time.monotonic() - start) * 1000, 1)
                traced_logger.error(
                    f"{operation} failed",
                    metadata={"duration_ms": duration_ms, "error": str(e)},
                )
                raise
            duration_ms = round((time.monotonic() - start) * 1000, 1)
            traced_logger.log(
                level,
                f"{operation} completed",
                metadata={"duration_ms": duration_ms},
            )
            return result

        return wrapper
    return decorator
