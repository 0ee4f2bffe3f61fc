"""
External Service Gateway: circuit breaker, concurrency limiter and timeout.

Every provider call goes through ServiceGateway.execute():
  1. Circuit breaker (fail fast while the provider is down)
  2. Concurrency semaphore (bounded in-flight calls)
  3. Timeout enforcement (asyncio.TimeoutError propagates to the caller)

Calls are not retried; a failed call is reported to the caller once.
"""
import asyncio
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Coroutine, Dict

from skillswap.utils.logger import logger
from skillswap.utils.metrics import inc


@dataclass(frozen=True)
class ServiceConfig:
    max_concurrent: int = 5
    timeout_seconds: float = 30.0
    circuit_failure_threshold: int = 5
    circuit_recovery_seconds: float = 30.0


class CircuitState(str, Enum):
    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


class CircuitBreaker:
    """Per-service circuit breaker (safe under asyncio's single-thread model)."""

    def __init__(self, service: str, config: ServiceConfig):
        self.service = service
        self.config = config
        self.state = CircuitState.CLOSED
        self.failure_count = 0
        self.last_failure_time: float = 0.0

    def allow_request(self) -> bool:
        if self.state != CircuitState.OPEN:
            return True
        elapsed = time.monotonic() - self.last_failure_time
        if elapsed >= self.config.circuit_recovery_seconds:
            self.state = CircuitState.HALF_OPEN
            logger.info(
                "circuit.half_open",
                extra={"service": self.service, "circuit_state": self.state.value},
            )
            return True
        return False

    def record_success(self) -> None:
        if self.state == CircuitState.HALF_OPEN:
            logger.info("circuit.closed", extra={"service": self.service})
        self.state = CircuitState.CLOSED
        self.failure_count = 0

    def record_failure(self) -> None:
        self.failure_count += 1
        self.last_failure_time = time.monotonic()
        if self.state == CircuitState.HALF_OPEN or self.failure_count >= self.config.circuit_failure_threshold:
            self.state = CircuitState.OPEN
            logger.warning(
                "circuit.open",
                extra={
                    "service": self.service,
                    "circuit_state": self.state.value,
                    "error": f"{self.failure_count} consecutive failures",
                },
            )


class CircuitOpenError(Exception):
    """Raised when a circuit breaker is open and the request is rejected."""

    def __init__(self, service: str):
        self.service = service
        super().__init__(f"Circuit breaker OPEN for {service}, request rejected")


class ServiceGateway:
    """Guards calls to a set of named external services."""

    def __init__(self, configs: Dict[str, ServiceConfig]) -> None:
        self.configs = dict(configs)
        self._circuits = {name: CircuitBreaker(name, cfg) for name, cfg in self.configs.items()}
        self._semaphores = {name: asyncio.Semaphore(cfg.max_concurrent) for name, cfg in self.configs.items()}

    async def execute(
        self,
        service: str,
        fn: Callable[..., Coroutine],
        *args: Any,
        **kwargs: Any,
    ) -> Any:
        """Run fn(*args, **kwargs) behind the service's breaker, semaphore and timeout."""
        cfg = self.configs[service]
        cb = self._circuits[service]

        if not cb.allow_request():
            inc(f"{service}.rejected")
            raise CircuitOpenError(service)

        try:
            async with self._semaphores[service]:
                result = await asyncio.wait_for(fn(*args, **kwargs), timeout=cfg.timeout_seconds)
        except Exception as exc:
            cb.record_failure()
            inc(f"{service}.error")
            logger.error(
                "gateway.failed",
                extra={
                    "service": service,
                    "error": str(exc)[:200],
                    "error_type": type(exc).__name__,
                },
            )
            raise

        cb.record_success()
        inc(f"{service}.success")
        return result

    def get_circuit_states(self) -> Dict[str, str]:
        """Return current circuit breaker states (for /metrics)."""
        return {svc: cb.state.value for svc, cb in self._circuits.items()}
