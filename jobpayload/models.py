from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Type

# Job types as written to the payload's "type" key
BROADCAST = "broadcast"
EVENT = "event"
MAIL = "mail"
NOTIFICATION = "notification"
JOB = "job"

# Classes the job deserializer is allowed to rebuild, keyed by "module.QualName"
_JOB_CLASSES: Dict[str, type] = {}


def class_path(cls: type) -> str:
    return f"{cls.__module__}.{cls.__qualname__}"


def register_job(cls: Type) -> Type:
    """
    Allow `cls` to be restored from a payload's `data.command`.
    Usable as a class decorator. Any class a job holds on to
    (mailables, notifications, models) must be registered too.
    """
    _JOB_CLASSES[class_path(cls)] = cls
    return cls


def registered_job_class(path: str) -> Optional[type]:
    return _JOB_CLASSES.get(path)


# ---------- Wrapper jobs ----------
@register_job
@dataclass
class BroadcastEvent:
    event: Any


@register_job
@dataclass
class CallQueuedListener:
    class_name: str
    method: str = "handle"
    data: List[Any] = field(default_factory=list)


@register_job
@dataclass
class SendQueuedMailable:
    mailable: Any


@register_job
@dataclass
class SendQueuedNotifications:
    notifiables: List[Any]
    notification: Any
    channels: Optional[List[str]] = None


@register_job
@dataclass
class FairSignalJob:
    queue: Optional[str] = None
    partition: Optional[Any] = None
    payload: Dict[str, Any] = field(default_factory=dict)


class JobKind(Enum):
    """Known job shapes, in classification priority order."""

    BROADCAST = (BroadcastEvent, BROADCAST)
    EVENT = (CallQueuedListener, EVENT)
    MAIL = (SendQueuedMailable, MAIL)
    NOTIFICATION = (SendQueuedNotifications, NOTIFICATION)
    OTHER = (None, JOB)

    def __init__(self, wrapper: Optional[type], type_name: str):
        self.wrapper = wrapper
        self.type_name = type_name

    @classmethod
    def of(cls, job: Any) -> "JobKind":
        for kind in cls:
            if kind.wrapper is not None and isinstance(job, kind.wrapper):
                return kind
        return cls.OTHER


def is_fair_signal(job: Any) -> bool:
    return isinstance(job, FairSignalJob)
