"""Resilient write path for every mutating operation.

Each call runs a fixed pipeline::

    validate -> rate limit -> circuit breaker(retry(persist))

Validation and rate-limit rejections happen before any network attempt and
never touch the breaker. The cooldown is recorded only after the
persistence call succeeds.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Mapping
from datetime import UTC, datetime
from typing import Any, TypeVar

from .backend.base import PersistenceBackend
from .circuit_breaker import CircuitBreaker
from .const import DEFAULT_MAX_FAILURES, DEFAULT_RESET_TIMEOUT
from .exceptions import PersistenceError, PyFacilityDirectoryError, RateLimitError, ValidationError
from .models import (
    DocumentKind,
    OperationKind,
    ReportPayload,
    ReviewPayload,
    SubmissionPayload,
    ValidationResult,
)
from .ratelimit import RateLimiter
from .retry import RetryExecutor
from .storage import KeyValueStore, MemoryStore
from .util import format_utc_timestamp, mask_device_id
from .validation import validate_report, validate_review, validate_submission

_LOGGER = logging.getLogger(__name__)

P = TypeVar("P")


class WriteGateway:
    """Guard persistence writes with validation, throttling and resilience."""

    def __init__(
        self,
        backend: PersistenceBackend,
        store: KeyValueStore | None = None,
        *,
        rate_limiter: RateLimiter | None = None,
        retry: RetryExecutor | None = None,
        max_failures: int = DEFAULT_MAX_FAILURES,
        reset_timeout: float = DEFAULT_RESET_TIMEOUT,
        clock: Callable[[], float] = time.time,
    ) -> None:
        store = store if store is not None else MemoryStore()
        self._backend = backend
        self._clock = clock
        self._rate_limiter = rate_limiter or RateLimiter(store, clock=clock)
        self._retry = retry or RetryExecutor()
        self._breakers = {
            kind: CircuitBreaker(
                kind.value,
                store=store,
                max_failures=max_failures,
                reset_timeout=reset_timeout,
                clock=clock,
            )
            for kind in OperationKind
        }

    @property
    def rate_limiter(self) -> RateLimiter:
        return self._rate_limiter

    def breaker(self, kind: OperationKind) -> CircuitBreaker:
        return self._breakers[kind]

    async def create_entry(self, payload: SubmissionPayload) -> str:
        """Submit a new facility for review and return the pending entry id."""
        return await self._submit(
            OperationKind.CREATE_ENTRY,
            DocumentKind.PENDING_ENTRY,
            validate_submission(payload),
            self._entry_document,
        )

    async def add_review(self, payload: ReviewPayload) -> str:
        return await self._submit(
            OperationKind.ADD_REVIEW,
            DocumentKind.REVIEW,
            validate_review(payload),
            self._review_document,
        )

    async def add_report(self, payload: ReportPayload) -> str:
        return await self._submit(
            OperationKind.ADD_REPORT,
            DocumentKind.REPORT,
            validate_report(payload),
            self._report_document,
        )

    async def _submit(
        self,
        operation: OperationKind,
        kind: DocumentKind,
        result: ValidationResult[P],
        build_document: Callable[[P, str], dict[str, Any]],
    ) -> str:
        if not result.valid:
            _LOGGER.debug("%s rejected by validation: %s", operation.value, result.errors)
            raise ValidationError(errors=result.errors)
        if not await self._rate_limiter.can_submit():
            remaining = await self._rate_limiter.remaining_cooldown()
            _LOGGER.debug("%s rate limited for %s seconds", operation.value, remaining)
            raise RateLimitError(remaining_seconds=remaining)

        device_id = await self._rate_limiter.identity.get()
        document = build_document(result.sanitized, device_id)
        breaker = self._breakers[operation]
        _LOGGER.debug("%s started for device %s", operation.value, mask_device_id(device_id))
        try:
            document_id = await breaker.execute(
                lambda: self._retry.run(lambda: self._persist(kind, document))
            )
        except PyFacilityDirectoryError as exc:
            _LOGGER.warning("%s failed: %s", operation.value, type(exc).__name__)
            raise
        await self._rate_limiter.record_submission()
        _LOGGER.debug("%s completed", operation.value)
        return document_id

    async def _persist(self, kind: DocumentKind, document: Mapping[str, Any]) -> str:
        try:
            return await self._backend.create(kind, document)
        except PyFacilityDirectoryError:
            raise
        except Exception as exc:
            raise PersistenceError("Persistence call failed.") from exc

    def _timestamp(self) -> str:
        return format_utc_timestamp(datetime.fromtimestamp(self._clock(), UTC))

    def _entry_document(self, payload: SubmissionPayload, device_id: str) -> dict[str, Any]:
        return {
            "name": payload.name,
            "description": payload.description,
            "latitude": payload.latitude,
            "longitude": payload.longitude,
            "rating": payload.rating,
            "tags": list(payload.tags),
            "notes": payload.free_text,
            "status": "PENDING",
            "deviceId": device_id,
            "createdAt": self._timestamp(),
        }

    def _review_document(self, payload: ReviewPayload, device_id: str) -> dict[str, Any]:
        return {
            "locationId": payload.location_id,
            "rating": payload.rating,
            "comment": payload.comment,
            "tags": list(payload.tags),
            "deviceId": device_id,
            "createdAt": self._timestamp(),
        }

    def _report_document(self, payload: ReportPayload, device_id: str) -> dict[str, Any]:
        return {
            "locationId": payload.location_id,
            "type": payload.issue_type,
            "details": payload.details,
            "status": "PENDING",
            "deviceId": device_id,
            "createdAt": self._timestamp(),
        }
