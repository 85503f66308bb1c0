"""Status transition table and action resolver.

Pure lookups over the tables in ``constants``; nothing here touches the
database. Unknown document types or statuses resolve to "nothing allowed"
so a typo can never open up a transition.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Tuple

from modules.documents.constants import (
    CONVERSIONS,
    INITIAL_STATUS,
    STATUS_TRANSITIONS,
    WORKFLOW_ACTIONS,
    DocumentStatus,
    DocumentType,
)
from modules.documents.exceptions import InvalidTransition


@dataclass(frozen=True)
class WorkflowAction:
    action: str
    label: str
    short_label: str


def initial_status(document_type: str) -> str:
    """Status every new document of ``document_type`` starts in."""
    return INITIAL_STATUS[document_type]


def allowed_next_statuses(document_type: str, current_status: str) -> Tuple[str, ...]:
    """Return the statuses ``current_status`` may move to, in display order."""
    return STATUS_TRANSITIONS.get(document_type, {}).get(current_status, ())


def can_transition(document_type: str, current_status: str, new_status: str) -> bool:
    return new_status in allowed_next_statuses(document_type, current_status)


def is_terminal(document_type: str, status: str) -> bool:
    """``True`` for a known status that has no outgoing transitions."""
    table = STATUS_TRANSITIONS.get(document_type, {})
    return status in table and not table[status]


def validate_transition(document_type: str, current_status: str, new_status: str) -> None:
    """Raise ``InvalidTransition`` unless ``new_status`` is allowed."""
    if not can_transition(document_type, current_status, new_status):
        raise InvalidTransition(
            f"Cannot transition {document_type} from {current_status} to {new_status}.",
            document_type=document_type,
            current_status=current_status,
            new_status=new_status,
        )


def available_actions(document_type: str, status: str) -> List[WorkflowAction]:
    return [
        WorkflowAction(action=action, label=label, short_label=short_label)
        for action, label, short_label in WORKFLOW_ACTIONS.get((document_type, status), [])
    ]


def can_convert(from_type: str, to_type: str, status: str) -> bool:
    return status in CONVERSIONS.get(from_type, {}).get(to_type, ())


def next_document_types(document_type: str, status: str) -> List[str]:
    return [
        target
        for target, statuses in CONVERSIONS.get(document_type, {}).items()
        if status in statuses
    ]


def workflow_status_message(document_type: str, status: str) -> str:
    """Short hint telling the user what unlocks the next document."""
    if document_type == DocumentType.QUOTATION:
        if status == DocumentStatus.ACCEPTED:
            return "Ready to convert to Sales Order"
        return "Accept quotation to enable conversion"
    if document_type == DocumentType.SALES_ORDER:
        if status == DocumentStatus.CONFIRMED:
            return "Ready to create Invoice and Delivery Note"
        return "Confirm sales order to enable conversions"
    return ""
