"""Document access rules.

Rules are evaluated in order and the first one that grants wins:

1. ``ADMIN`` role may do everything.
2. The owner may read, write, comment and download; deleting the document
   additionally needs ``DOC_DELETE``.
3. READ / DOWNLOAD: public documents, internal documents with ``DOC_READ`` /
   ``DOC_DOWNLOAD``, or any document of a unit the subject belongs to.
4. WRITE needs ``DOC_WRITE``.
5. REVIEW (managing revision-request status) needs ``DOC_WRITE`` or ``DOC_REVIEW``.
6. COMMENT: public documents, or internal documents with ``DOC_READ``.

Everything else is denied. The functions here are pure and never touch storage.
"""

from enum import StrEnum

from auth.domain.entities import Subject
from documents.domain.entities import Document, Visibility
from shared.exceptions import AuthorizationError

ADMIN_ROLE = "ADMIN"

DOC_CREATE = "DOC_CREATE"
DOC_READ = "DOC_READ"
DOC_WRITE = "DOC_WRITE"
DOC_DELETE = "DOC_DELETE"
DOC_DOWNLOAD = "DOC_DOWNLOAD"
DOC_REVIEW = "DOC_REVIEW"


class Action(StrEnum):
    READ = "READ"
    WRITE = "WRITE"
    DELETE = "DELETE"
    DOWNLOAD = "DOWNLOAD"
    COMMENT = "COMMENT"
    REVIEW = "REVIEW"


_OWNER_ACTIONS = frozenset({Action.READ, Action.WRITE, Action.COMMENT, Action.DOWNLOAD})

_VISIBILITY_CODES = {
    Action.READ: DOC_READ,
    Action.DOWNLOAD: DOC_DOWNLOAD,
}


def is_admin(subject: Subject) -> bool:
    return ADMIN_ROLE in subject.roles


def can_perform(subject: Subject, document: Document, action: Action | str) -> bool:
    try:
        action = Action(action)
    except ValueError:
        raise ValueError(f"Unknown action: {action!r}") from None

    if is_admin(subject):
        return True

    if document.owner_user_id == subject.id:
        if action in _OWNER_ACTIONS:
            return True
        if action is Action.DELETE:
            return DOC_DELETE in subject.permission_codes

    if action in _VISIBILITY_CODES:
        if document.visibility == Visibility.PUBLIC:
            return True
        if (
            document.visibility == Visibility.INTERNAL
            and _VISIBILITY_CODES[action] in subject.permission_codes
        ):
            return True
        return document.unit_id in subject.unit_ids

    if action is Action.WRITE:
        return DOC_WRITE in subject.permission_codes

    if action is Action.REVIEW:
        return bool({DOC_WRITE, DOC_REVIEW} & subject.permission_codes)

    if action is Action.COMMENT:
        if document.visibility == Visibility.PUBLIC:
            return True
        return document.visibility == Visibility.INTERNAL and DOC_READ in subject.permission_codes

    return False


def ensure_can_perform(subject: Subject, document: Document, action: Action | str) -> None:
    if not can_perform(subject, document, action):
        raise AuthorizationError(f"Not allowed to {Action(action).lower()} document {document.id}")


def can_file_revision(subject: Subject, document: Document) -> bool:
    """Revision requests may be filed by the owner as well as writers and reviewers."""
    return document.owner_user_id == subject.id or can_perform(subject, document, Action.REVIEW)


def can_create_documents(subject: Subject) -> bool:
    return DOC_CREATE in subject.permission_codes
