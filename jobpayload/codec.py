"""
Payload codec.

A raw payload is a JSON object. The job itself travels as a string at
`data.command`: the pickled job object, base64-encoded so it fits in JSON.
Only classes registered in `jobpayload.models` can be unpickled.

    {"uuid": "...", "displayName": "app.jobs.SendInvoice",
     "data": {"commandName": "app.jobs.SendInvoice", "command": "gASV..."},
     "tags": ["app.models.Invoice:12"], "retry_of": null}
"""
import base64
import binascii
import io
import json
import pickle
import uuid as uuidlib
from typing import Any, Dict, Optional, Tuple

from .errors import DecodeError, JobDeserializationError, PayloadEncodeError
from .models import class_path, registered_job_class
from .utils import data_get


class _JobUnpickler(pickle.Unpickler):
    def find_class(self, module, name):
        cls = registered_job_class(f"{module}.{name}")
        if cls is None:
            raise pickle.UnpicklingError(f"Job class {module}.{name} is not registered")
        return cls


# ---------- Job objects ----------
def serialize_job(job: Any) -> str:
    return base64.b64encode(pickle.dumps(job, protocol=pickle.HIGHEST_PROTOCOL)).decode("ascii")


def deserialize_job(command: Any) -> Any:
    if not isinstance(command, str) or not command:
        raise JobDeserializationError(f"data.command must be a non-empty string, got {type(command).__name__}")
    try:
        blob = base64.b64decode(command, validate=True)
    except (binascii.Error, ValueError) as e:
        raise JobDeserializationError(f"data.command is not valid base64: {e}") from e
    try:
        return _JobUnpickler(io.BytesIO(blob)).load()
    except Exception as e:
        raise JobDeserializationError(f"Could not restore job from data.command: {e}") from e


# ---------- Documents ----------
def payload_text(raw: Any) -> Any:
    """Raw payloads read off a socket may be bytes; the envelope keeps str."""
    if isinstance(raw, (bytes, bytearray)):
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise DecodeError(f"Payload is not valid UTF-8: {e}") from e
    return raw


def decode_document(raw: Any) -> Dict[str, Any]:
    raw = payload_text(raw)
    try:
        decoded = json.loads(raw)
    except (TypeError, ValueError) as e:
        raise DecodeError(f"Payload is not valid JSON: {e}") from e
    if not isinstance(decoded, dict):
        raise DecodeError(f"Payload must be a JSON object, got {type(decoded).__name__}")
    return decoded


def decode(raw: Any) -> Tuple[Dict[str, Any], Any]:
    """Parse a raw payload into (decoded mapping, job object)."""
    decoded = decode_document(raw)
    job = deserialize_job(data_get(decoded, "data.command"))
    return decoded, job


def encode(decoded: Dict[str, Any]) -> str:
    try:
        return json.dumps(decoded, separators=(",", ":"), ensure_ascii=False, allow_nan=False)
    except (TypeError, ValueError) as e:
        raise PayloadEncodeError(f"Payload could not be encoded: {e}") from e


def create_payload(
    job: Any,
    *,
    uuid: Optional[str] = None,
    display_name: Optional[str] = None,
    **extra: Any,
) -> str:
    """Build the raw payload a producer pushes for `job` (before `prepare`)."""
    name = class_path(type(job))
    document = {
        "uuid": uuid or str(uuidlib.uuid4()),
        "displayName": display_name or name,
        "data": {
            "commandName": name,
            "command": serialize_job(job),
        },
    }
    document.update(extra)
    return encode(document)
