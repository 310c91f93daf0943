"""Client SDK: REST client, push-event plumbing and the reconciliation store."""

from tasksync.sdk.api_client import ApiError, TaskSyncApiClient
from tasksync.sdk.events import EventDispatcher, EventSource
from tasksync.sdk.realtime import RealtimeClient, RealtimeConnectionError, live_session
from tasksync.sdk.store import Notification, ReconciliationStore, normalize_list, normalize_task
from tasksync.sdk.view import TaskFilters, compute_view, is_overdue

__all__ = [
    "ApiError",
    "EventDispatcher",
    "EventSource",
    "Notification",
    "RealtimeClient",
    "RealtimeConnectionError",
    "ReconciliationStore",
    "TaskFilters",
    "TaskSyncApiClient",
    "compute_view",
    "is_overdue",
    "live_session",
    "normalize_list",
    "normalize_task",
]
