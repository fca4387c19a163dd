from typing import Any, Iterable, List

from .models import (
    BroadcastEvent, CallQueuedListener, SendQueuedMailable, SendQueuedNotifications,
)


def tags_for(job: Any) -> List[str]:
    """
    Tags a job reports for itself.

    Explicit `tags()` methods win (on the job, or on the objects a wrapper
    job carries). Otherwise every attribute exposing `get_key()` is
    tagged as 'module.Class:key'.
    """
    targets = targets_for(job)
    tags = explicit_tags(targets) or model_tags(targets)
    return _unique(str(t) for t in tags)


def targets_for(job: Any) -> List[Any]:
    if isinstance(job, BroadcastEvent):
        return [job.event]
    if isinstance(job, CallQueuedListener):
        return list(job.data)
    if isinstance(job, SendQueuedMailable):
        return [job.mailable]
    if isinstance(job, SendQueuedNotifications):
        return [job.notification]
    return [job]


def explicit_tags(targets: Iterable[Any]) -> List[Any]:
    tags = []
    for target in targets:
        method = getattr(target, "tags", None)
        if callable(method):
            tags.extend(method() or [])
    return tags


def model_tags(targets: Iterable[Any]) -> List[str]:
    tags = []
    for target in targets:
        for model in _models_in(target):
            cls = type(model)
            tags.append(f"{cls.__module__}.{cls.__qualname__}:{model.get_key()}")
    return tags


def _is_model(value: Any) -> bool:
    return callable(getattr(value, "get_key", None)) and not isinstance(value, type)


def _models_in(target: Any) -> List[Any]:
    attrs = getattr(target, "__dict__", None)
    if not attrs:
        return []
    found = []
    for value in attrs.values():
        if _is_model(value):
            found.append(value)
        elif isinstance(value, (list, tuple, set, frozenset)):
            found.extend(v for v in value if _is_model(v))
    return found


def _unique(values: Iterable[str]) -> List[str]:
    seen = set()
    out = []
    for v in values:
        if v not in seen:
            seen.add(v)
            out.append(v)
    return out
