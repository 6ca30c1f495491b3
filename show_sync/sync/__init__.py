"""
Sync module for show-sync.

Components:
    - RetryPolicy: Bounded retries with exponential backoff
    - Reconciler: Per-show create / update / image decisions
    - WorkerPool: Bounded thread pool over catalog pages
    - SyncRunner / run_sync: One complete run

Usage:
    from show_sync.sync import run_sync

    stats = run_sync(config)
"""

from show_sync.sync.reconciler import Reconciler
from show_sync.sync.retry import RetryPolicy
from show_sync.sync.runner import SyncRunner, run_sync
from show_sync.sync.scheduler import WorkerPool

__all__ = [
    "RetryPolicy",
    "Reconciler",
    "WorkerPool",
    "SyncRunner",
    "run_sync",
]
