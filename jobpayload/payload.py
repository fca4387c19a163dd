from typing import Any, List, Mapping, Optional

from .codec import decode, encode, payload_text
from .config import PayloadConfig
from .errors import MissingIdentityError
from .models import JobKind
from .signals import FairSignalEmitter
from .tags import tags_for
from .utils import data_get, pushed_at


class JobPayload:
    """
    A queued job's payload, kept both as the raw JSON string (`value`)
    and as the decoded dict (`decoded`). Every mutation re-encodes `value`.

    `job` is restored from `data.command` once, when the payload is built.
    """

    def __init__(
        self,
        value: str,
        config: Optional[PayloadConfig] = None,
        store: Optional[Any] = None,
    ):
        value = payload_text(value)
        self.decoded, self.job = decode(value)
        self.value = value
        self.config = config or PayloadConfig()
        self.signals = FairSignalEmitter(self.config, store)

    # ---------- Identity ----------
    def identity(self) -> str:
        for key in ("uuid", "id"):
            if self.decoded.get(key) is not None:
                return self.decoded[key]
        raise MissingIdentityError("Payload has neither 'uuid' nor 'id'")

    def record_fairness_signal(self, job_id: Optional[str] = None) -> bool:
        job_id = self.identity() if job_id is None else job_id
        return self.signals.emit(self.job, job_id)

    def id(self) -> str:
        """
        The job id. Also pushes a fairness signal for fair-signal jobs
        when a signal prefix is configured, on every call.
        """
        job_id = self.identity()
        self.record_fairness_signal(job_id)
        return job_id

    # ---------- Accessors ----------
    def field(self, path: str) -> Any:
        return data_get(self.decoded, path)

    def tags(self) -> List[str]:
        tags = self.decoded.get("tags")
        if not isinstance(tags, list):
            return []
        return list(tags)

    def is_retry(self) -> bool:
        return self.decoded.get("retry_of") is not None

    def retry_of(self) -> Optional[str]:
        return self.decoded.get("retry_of")

    def command_name(self) -> Optional[str]:
        return self.field("data.commandName")

    def command(self) -> Optional[str]:
        return self.field("data.command")

    def display_name(self) -> Optional[str]:
        return self.field("displayName")

    # ---------- Mutation ----------
    def set(self, values: Mapping[str, Any]) -> "JobPayload":
        """Shallow-merge `values` into the payload. Nothing changes if encoding fails."""
        decoded = {**self.decoded, **values}
        value = encode(decoded)
        self.decoded, self.value = decoded, value
        return self

    def prepare(self, job: Any) -> "JobPayload":
        """Stamp type, tags and pushedAt before the payload goes onto the queue."""
        return self.set({
            "type": self.determine_type(job),
            "tags": self.determine_tags(job),
            "pushedAt": pushed_at(),
        })

    def determine_type(self, job: Any) -> str:
        return JobKind.of(job).type_name

    def determine_tags(self, job: Any) -> List[str]:
        tags = self.tags()
        if not job or isinstance(job, str):
            return tags
        for tag in tags_for(job):
            if tag not in tags:
                tags.append(tag)
        return tags

    # ---------- Mapping access ----------
    def get(self, key: str, default: Any = None) -> Any:
        return self.decoded.get(key, default)

    def has(self, key: str) -> bool:
        return key in self.decoded

    def put(self, key: str, value: Any) -> "JobPayload":
        return self.set({key: value})

    def remove(self, key: str) -> "JobPayload":
        if key in self.decoded:
            decoded = {k: v for k, v in self.decoded.items() if k != key}
            self.value = encode(decoded)
            self.decoded = decoded
        return self
