"""Fireblocks transaction statuses and their classification.

The tracker only needs to know whether to keep polling, stop with a
result, or stop with an error. ``classify_status`` answers that from a
static table covering every status.
"""
from __future__ import annotations

from enum import Enum
from types import MappingProxyType
from typing import Mapping, Union


class TransactionStatus(str, Enum):
    """Transaction status as reported by Fireblocks."""
    SUBMITTED = "SUBMITTED"
    QUEUED = "QUEUED"
    PENDING_SIGNATURE = "PENDING_SIGNATURE"
    PENDING_AUTHORIZATION = "PENDING_AUTHORIZATION"
    PENDING_3RD_PARTY_MANUAL_APPROVAL = "PENDING_3RD_PARTY_MANUAL_APPROVAL"
    PENDING_3RD_PARTY = "PENDING_3RD_PARTY"
    PENDING = "PENDING"
    PENDING_AML_SCREENING = "PENDING_AML_SCREENING"
    BROADCASTING = "BROADCASTING"
    CONFIRMING = "CONFIRMING"
    CONFIRMED = "CONFIRMED"
    COMPLETED = "COMPLETED"
    PARTIALLY_COMPLETED = "PARTIALLY_COMPLETED"
    CANCELLING = "CANCELLING"
    CANCELLED = "CANCELLED"
    REJECTED = "REJECTED"
    FAILED = "FAILED"
    TIMEOUT = "TIMEOUT"  # reported by Fireblocks, not our local budget
    BLOCKED = "BLOCKED"


class StatusClass(str, Enum):
    """What the tracker does after observing a status."""
    CONTINUE = "continue"
    SUCCESS = "success"
    FAILURE = "failure"


_S = TransactionStatus

# BROADCASTING counts as success: signing and authorization are done,
# which is what callers wait on.
STATUS_CLASSES: Mapping[TransactionStatus, StatusClass] = MappingProxyType({
    _S.SUBMITTED: StatusClass.CONTINUE,
    _S.QUEUED: StatusClass.CONTINUE,
    _S.PENDING_SIGNATURE: StatusClass.CONTINUE,
    _S.PENDING_AUTHORIZATION: StatusClass.CONTINUE,
    _S.PENDING_3RD_PARTY_MANUAL_APPROVAL: StatusClass.CONTINUE,
    _S.PENDING_3RD_PARTY: StatusClass.CONTINUE,
    _S.PENDING: StatusClass.CONTINUE,
    _S.PENDING_AML_SCREENING: StatusClass.CONTINUE,
    _S.CONFIRMING: StatusClass.CONTINUE,
    _S.CONFIRMED: StatusClass.CONTINUE,
    _S.PARTIALLY_COMPLETED: StatusClass.CONTINUE,
    _S.CANCELLING: StatusClass.CONTINUE,
    _S.BROADCASTING: StatusClass.SUCCESS,
    _S.COMPLETED: StatusClass.SUCCESS,
    _S.BLOCKED: StatusClass.FAILURE,
    _S.CANCELLED: StatusClass.FAILURE,
    _S.FAILED: StatusClass.FAILURE,
    _S.REJECTED: StatusClass.FAILURE,
    _S.TIMEOUT: StatusClass.FAILURE,
})


def classify_status(status: Union[TransactionStatus, str]) -> StatusClass:
    """Classify a status. Accepts the enum or its string value.

    Raises:
        ValueError: If ``status`` is not a known Fireblocks status
    """
    return STATUS_CLASSES[TransactionStatus(status)]


def is_final_status(status: Union[TransactionStatus, str]) -> bool:
    """True if polling should stop on this status."""
    return classify_status(status) is not StatusClass.CONTINUE


def is_successful_status(status: Union[TransactionStatus, str]) -> bool:
    return classify_status(status) is StatusClass.SUCCESS
