"""Usage recording: sampling, batching and report delivery."""

from __future__ import annotations

from gql_usage.recorder.batcher import (
    Batcher as Batcher,
    BatcherClosedError as BatcherClosedError,
)
from gql_usage.recorder.recorder import (
    CompletionStatus as CompletionStatus,
    UsageRecorder as UsageRecorder,
)
from gql_usage.recorder.send import create_hive_send_fn as create_hive_send_fn

__all__ = [
    "Batcher",
    "BatcherClosedError",
    "CompletionStatus",
    "UsageRecorder",
    "create_hive_send_fn",
]
