from typing import Optional


class PayloadError(Exception):
    """Base class for every error raised around a job payload."""


# ---------- Construction ----------
class DecodeError(PayloadError):
    """Raw payload is not a JSON object."""


class JobDeserializationError(PayloadError):
    """The embedded `data.command` could not be turned back into a job."""


class PayloadEncodeError(PayloadError):
    """Decoded payload could not be serialized back to JSON."""


# ---------- Identity / fairness signals ----------
class MissingIdentityError(PayloadError):
    """Payload carries neither `uuid` nor `id`."""


class SignalError(PayloadError):
    def __init__(self, message: str, job_id: Optional[str] = None):
        super().__init__(message)
        self.job_id = job_id


class FairSignalJobMalformedError(SignalError):
    """Fair-signal job is missing its queue or partition."""


class StoreUnavailableError(SignalError):
    """Signal store could not be reached."""
