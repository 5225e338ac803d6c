"""Pytest 配置"""

import asyncio

import pytest

from inkies.compiler import CompileOutcome
from inkies.telemetry import metrics


@pytest.fixture
def anyio_backend():
    """指定 anyio 只使用 asyncio backend"""
    return "asyncio"


@pytest.fixture(autouse=True)
def reset_metrics():
    """每次测试前重置指标"""
    metrics.reset()
    yield
    metrics.reset()


class FakeInvoker:
    """可控的 ProcessInvoker 替身

    - outcome_for: 按源码返回结果的函数
    - gate: 设置后每次调用都等待该 Event（模拟慢编译）
    - 记录调用参数和最大并发数
    """

    def __init__(self, outcome_for=None, gate: asyncio.Event | None = None):
        self.outcome_for = outcome_for or (lambda text: CompileOutcome.success('{"inkVersion":21}'))
        self.gate = gate
        self.calls: list[tuple[str | None, str]] = []
        self.running = 0
        self.max_running = 0

    async def invoke(self, executable, source_text):
        self.calls.append((executable, source_text))
        self.running += 1
        self.max_running = max(self.max_running, self.running)
        try:
            if self.gate is not None:
                await self.gate.wait()
            return self.outcome_for(source_text)
        finally:
            self.running -= 1


class FakeLocator:
    """固定返回路径的 CompilerLocator 替身"""

    def __init__(self, path: str | None = "/usr/local/bin/inklecate"):
        self.path = path

    def locate(self):
        return self.path


@pytest.fixture
def fake_invoker():
    return FakeInvoker()


@pytest.fixture
def fake_locator():
    return FakeLocator()
