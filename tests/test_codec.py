import base64
import json
import pickle
from dataclasses import dataclass

import pytest

from jobpayload.codec import (
    create_payload, decode, decode_document, deserialize_job, encode, serialize_job,
)
from jobpayload.errors import DecodeError, JobDeserializationError, PayloadEncodeError
from jobpayload.models import FairSignalJob, SendQueuedMailable, register_job


@register_job
@dataclass
class InvoiceMail:
    invoice_id: int


@dataclass
class NotRegistered:
    value: str = "x"


def test_job_survives_serialization():
    job = SendQueuedMailable(mailable=InvoiceMail(invoice_id=7))
    restored = deserialize_job(serialize_job(job))
    assert restored == job
    assert isinstance(restored.mailable, InvoiceMail)


def test_unregistered_class_is_rejected():
    with pytest.raises(JobDeserializationError):
        deserialize_job(serialize_job(NotRegistered()))


def test_builtins_outside_registry_are_rejected():
    command = base64.b64encode(pickle.dumps(print)).decode()
    with pytest.raises(JobDeserializationError):
        deserialize_job(command)


@pytest.mark.parametrize("command", [None, "", 42, "not base64!!", base64.b64encode(b"junk").decode()])
def test_bad_command_raises_job_deserialization_error(command):
    with pytest.raises(JobDeserializationError):
        deserialize_job(command)


@pytest.mark.parametrize("raw", ["", "{not json", "[1, 2]", "\"text\"", None, b"\xff\xfe"])
def test_bad_document_raises_decode_error(raw):
    with pytest.raises(DecodeError):
        decode_document(raw)


def test_decode_errors_are_distinct():
    assert not issubclass(DecodeError, JobDeserializationError)
    assert not issubclass(JobDeserializationError, DecodeError)


def test_decode_requires_command():
    with pytest.raises(JobDeserializationError):
        decode(json.dumps({"uuid": "j1", "data": {}}))


def test_decode_returns_mapping_and_job():
    raw = create_payload(FairSignalJob(queue="q1", partition=3), uuid="j1")
    decoded, job = decode(raw)
    assert decoded["uuid"] == "j1"
    assert job == FairSignalJob(queue="q1", partition=3)


def test_encode_decode_round_trip():
    raw = create_payload(
        InvoiceMail(invoice_id=1),
        uuid="j1",
        tags=["billing", "ünïcode"],
        retry_of=None,
        attempts=2,
    )
    decoded, _ = decode(raw)
    again, _ = decode(encode(decoded))
    assert again == decoded


def test_encode_rejects_unserializable_values():
    with pytest.raises(PayloadEncodeError):
        encode({"uuid": "j1", "when": object()})
    with pytest.raises(PayloadEncodeError):
        encode({"uuid": "j1", "score": float("nan")})


def test_create_payload_defaults():
    decoded = json.loads(create_payload(InvoiceMail(invoice_id=3)))
    assert decoded["uuid"]
    assert decoded["displayName"] == f"{InvoiceMail.__module__}.InvoiceMail"
    assert decoded["data"]["commandName"] == decoded["displayName"]
    assert deserialize_job(decoded["data"]["command"]) == InvoiceMail(invoice_id=3)


def test_create_payload_overrides():
    decoded = json.loads(create_payload(InvoiceMail(invoice_id=3), uuid="abc", display_name="Invoice"))
    assert decoded["uuid"] == "abc"
    assert decoded["displayName"] == "Invoice"
