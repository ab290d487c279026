"""Domain service base classes and errors.

Each domain service wraps one business operation behind a single async
``call`` method, logs through its own logger and announces results on the
event bus so other parts of the application can react without coupling.
"""

from __future__ import annotations

import functools
import logging
import time
from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any, Generic, TypeVar

from lingua.infrastructure.messaging.event_bus import DomainEvent, EventBus

RequestT = TypeVar("RequestT")
ResultT = TypeVar("ResultT")


class DomainService(ABC, Generic[RequestT, ResultT]):
    """Base class for domain services.

    Services are named Verb + Noun (``DetectDuplicates``) and expose exactly
    one entry point:

        ```python
        class DetectDuplicates(DomainService[DetectRequest, DetectResult]):
            async def call(self, request):
                duplicate_map = self.detector.find_all_duplicates(request.cards)
                await self._publish_event(DuplicatesDetectedEvent(...))
                return DetectResult(duplicate_map=duplicate_map)
        ```
    """

    def __init__(self, event_bus: EventBus) -> None:
        """Args:
            event_bus: Bus that receives the events this service emits
        """
        self.event_bus = event_bus
        self.logger = logging.getLogger(self.__class__.__name__)

    @abstractmethod
    async def call(self, request: RequestT) -> ResultT:
        """Run the operation.

        Raises:
            ValidationError: When the request is malformed
            BusinessRuleViolationError: When a domain rule forbids the operation
        """

    async def _publish_event(self, event: DomainEvent) -> None:
        """Publish an event; a failing bus never breaks the operation itself."""
        try:
            await self.event_bus.publish(event)
        except Exception as e:
            self.logger.error(f"Failed to publish event {event.event_name}: {e}")


class DomainServiceError(Exception):
    """Base exception for domain service errors."""

    def __init__(self, message: str, error_code: str | None = None) -> None:
        super().__init__(message)
        self.error_code = error_code


class ValidationError(DomainServiceError):
    """Request data does not satisfy the service's constraints."""

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message, "VALIDATION_ERROR")
        self.field = field


class BusinessRuleViolationError(DomainServiceError):
    """The requested operation violates a domain rule."""

    def __init__(self, message: str, rule: str | None = None) -> None:
        super().__init__(message, "BUSINESS_RULE_VIOLATION")
        self.rule = rule


def log_domain_operation(func: Callable[..., Any]) -> Callable[..., Any]:
    """Log start, completion time and failure of a service ``call``."""

    @functools.wraps(func)
    async def wrapper(self: Any, request: Any) -> Any:
        operation_name = f"{self.__class__.__name__}.call"
        self.logger.info(f"{operation_name} started for {type(request).__name__}")

        start_time = time.perf_counter()
        try:
            result = await func(self, request)
        except Exception as e:
            duration = time.perf_counter() - start_time
            self.logger.error(f"{operation_name} failed after {duration:.3f}s: {e}")
            raise
        duration = time.perf_counter() - start_time
        self.logger.info(f"{operation_name} finished in {duration:.3f}s")
        return result

    return wrapper


def validate_request(
    validator_func: Callable[[Any], None],
) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """Run ``validator_func`` on the request before the service executes.

    Any exception raised by the validator is re-raised as ``ValidationError``;
    a ``ValidationError`` passes through untouched so its ``field`` survives.
    """

    def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
        @functools.wraps(func)
        async def wrapper(self: Any, request: Any) -> Any:
            try:
                validator_func(request)
            except ValidationError:
                raise
            except Exception as e:
                raise ValidationError(f"Invalid {type(request).__name__}: {e}") from e

            return await func(self, request)

        return wrapper

    return decorator
