"""Telemetry - 日志和指标入口

日志格式: [module:doc[:8]] msg
指标示例: compile.started, compile.failed{kind=...}, render.reused, export.ok
"""

import logging

from . import config


def get_logger(name: str) -> logging.Logger:
    """获取模块 logger（通常传 __name__）"""
    return logging.getLogger(name)


def configure_logging(level: str | None = None) -> None:
    """配置根 logger

    供入口（web server / CLI）调用，库代码本身不调用。

    Args:
        level: 日志级别，None 使用 config.LOG_LEVEL
    """
    logging.basicConfig(
        level=(level or config.LOG_LEVEL).upper(),
        format=config.LOG_FORMAT,
    )


def format_doc_log(module: str, document_id: str, msg: str) -> str:
    """格式化带 document_id 的日志消息

    Returns:
        格式化的消息: [module:document_id[:8]] msg
    """
    doc_short = document_id[:8] if document_id else "unknown"
    return f"[{module}:{doc_short}] {msg}"


def preview_text(text: str, limit: int | None = None) -> str:
    """截断源码用于日志输出，换行替换为 ⏎"""
    limit = limit or config.LOG_MAX_SOURCE_LEN
    flat = text.replace("\n", "⏎")
    if len(flat) <= limit:
        return flat
    return flat[:limit] + "…"


class Metrics:
    """指标收集 facade

    内存计数器 + gauge，测试可直接读取。
    """

    def __init__(self):
        self._counters: dict[str, int] = {}
        self._gauges: dict[str, float] = {}

    def inc(self, name: str, labels: dict[str, str] | None = None, value: int = 1) -> None:
        """递增计数器

        Args:
            name: 指标名（如 "compile.failed"）
            labels: 可选标签（如 {"kind": "process_error"}）
            value: 递增值，默认 1
        """
        if not config.METRICS_ENABLED:
            return
        key = self._make_key(name, labels)
        self._counters[key] = self._counters.get(key, 0) + value

    def gauge(self, name: str, value: float, labels: dict[str, str] | None = None) -> None:
        """设置 gauge 值（如 coordinator.documents）"""
        if not config.METRICS_ENABLED:
            return
        self._gauges[self._make_key(name, labels)] = value

    def get_counter(self, name: str, labels: dict[str, str] | None = None) -> int:
        """获取计数器值（用于测试）"""
        return self._counters.get(self._make_key(name, labels), 0)

    def get_gauge(self, name: str, labels: dict[str, str] | None = None) -> float:
        """获取 gauge 值（用于测试）"""
        return self._gauges.get(self._make_key(name, labels), 0.0)

    def reset(self) -> None:
        """重置所有指标（用于测试）"""
        self._counters.clear()
        self._gauges.clear()

    def snapshot(self) -> dict[str, dict]:
        """导出当前所有指标（/api/metrics 使用）"""
        return {"counters": dict(self._counters), "gauges": dict(self._gauges)}

    @staticmethod
    def _make_key(name: str, labels: dict[str, str] | None) -> str:
        if not labels:
            return name
        label_str = ",".join(f"{k}={v}" for k, v in sorted(labels.items()))
        return f"{name}{{{label_str}}}"


# 全局指标实例
metrics = Metrics()
