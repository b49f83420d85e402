"""Record executions of collected operations and ship them as usage reports."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from gql_usage.formats.usage_report import (
    Client,
    Execution,
    ExecutionError,
    ExecutionOutcome,
    Operation,
    OperationDefinition,
    OperationMapRecord,
    OperationMetadata,
    Report,
)
from gql_usage.recorder.batcher import Batcher, BatcherClosedError, BatchItem
from gql_usage.recorder.sampling import random_sampling

if TYPE_CHECKING:
    from gql_usage.config import UsageConfig

logger = logging.getLogger(__name__)

SendFn = Callable[[Report], Awaitable[None]]
CompleteFn = Callable[[ExecutionOutcome], "asyncio.Future[CompletionStatus]"]


class CompletionStatus(str, Enum):
    """What happened to a recorded execution."""

    SENT = "sent"
    SAMPLED_OUT = "sampled_out"
    FAILED = "failed"


@dataclass
class RecordedExecution:
    """One buffered execution, as handed to the batcher."""

    definition: OperationDefinition
    execution: Execution
    client: Client | None = None


def normalize_outcome(outcome: ExecutionOutcome, duration_ns: int) -> Execution:
    errors = [
        ExecutionError(
            message=error.message,
            path=".".join(str(segment) for segment in error.path) if error.path else None,
        )
        for error in outcome.errors or []
    ]
    return Execution(
        ok=outcome.ok and not errors,
        duration=duration_ns,
        errors_total=len(errors),
        errors=errors,
    )


def build_report(items: list[BatchItem[RecordedExecution]], now_ms: int | None = None) -> Report:
    """Assemble a report; the operation map keeps the first record per key."""
    if now_ms is None:
        now_ms = int(time.time() * 1000)

    report = Report(size=len(items))
    for item in items:
        recorded = item.data
        definition = recorded.definition
        report.operations.append(
            Operation(
                operation_map_key=definition.key,
                timestamp=now_ms - int(item.delta_ms),
                execution=recorded.execution,
                metadata=OperationMetadata(client=recorded.client),
            )
        )
        if definition.key not in report.map:
            report.map[definition.key] = OperationMapRecord(
                operation=definition.operation,
                operation_name=definition.operation_name,
                fields=definition.fields,
            )
    return report


class UsageRecorder:
    """Measures executions of operations and batches them into reports.

    ``collect`` starts the clock and returns a completion function.  Calling
    it with the execution outcome buffers the execution and returns a future
    that resolves to a ``CompletionStatus`` once the report holding it was
    sent.  The future never raises: send failures are logged here so that
    usage reporting cannot break the caller.

    The completion function must be called from the thread running the
    recorder's event loop.  Code completing executions elsewhere (sync
    execution in a worker thread, for instance) should hand the outcome
    over with ``loop.call_soon_threadsafe``; calling it without a running
    loop raises ``RuntimeError`` before anything is recorded.
    """

    def __init__(
        self,
        send: SendFn,
        *,
        sample_rate: float = 1.0,
        send_interval_ms: float = 5_000,
        max_size: int = 25,
    ):
        self.send = send
        self._should_include = random_sampling(sample_rate)
        self._batcher: Batcher[RecordedExecution] = Batcher(
            self._on_flush,
            max_items=max_size,
            max_elapsed_ms=send_interval_ms,
        )

    @classmethod
    def from_config(cls, config: UsageConfig, send: SendFn | None = None) -> UsageRecorder:
        """Build a recorder; without ``send``, reports go to the configured endpoint."""
        from gql_usage.recorder.send import create_hive_send_fn

        if send is None:
            send = create_hive_send_fn(
                config.token,
                endpoint=config.endpoint,
                client_name=config.client_name,
                client_version=config.client_version,
            )
        return cls(
            send,
            sample_rate=config.sample_rate,
            send_interval_ms=config.send_interval_ms,
            max_size=config.max_size,
        )

    async def _on_flush(self, items: list[BatchItem[RecordedExecution]]) -> None:
        await self.send(build_report(items))

    def collect(self, definition: OperationDefinition, client: Client | None = None) -> CompleteFn:
        started_at = time.monotonic_ns()

        def complete(outcome: ExecutionOutcome) -> asyncio.Future[CompletionStatus]:
            try:
                loop = asyncio.get_running_loop()
            except RuntimeError:
                raise RuntimeError(
                    "Usage completion must run in the recorder's event loop thread"
                ) from None
            if not self._should_include():
                skipped: asyncio.Future[CompletionStatus] = loop.create_future()
                skipped.set_result(CompletionStatus.SAMPLED_OUT)
                return skipped

            execution = normalize_outcome(outcome, time.monotonic_ns() - started_at)
            try:
                flushed = self._batcher.add(
                    RecordedExecution(definition=definition, execution=execution, client=client)
                )
            except BatcherClosedError as e:
                logger.error(f"Failed to record usage of {definition.operation_name or definition.key}: {e}")
                failed: asyncio.Future[CompletionStatus] = loop.create_future()
                failed.set_result(CompletionStatus.FAILED)
                return failed

            return asyncio.ensure_future(self._acknowledge(definition, flushed))

        return complete

    async def _acknowledge(
        self, definition: OperationDefinition, flushed: asyncio.Future[None]
    ) -> CompletionStatus:
        try:
            await flushed
        except Exception as e:
            logger.error(f"Failed to send usage of {definition.operation_name or definition.key}: {e}")
            return CompletionStatus.FAILED
        return CompletionStatus.SENT

    async def dispose(self) -> None:
        """Send everything still buffered; no report is sent afterwards."""
        await self._batcher.wait_for_all()

    @property
    def stats(self) -> dict[str, int]:
        return self._batcher.stats
