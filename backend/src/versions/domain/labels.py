import re

from shared.exceptions import MalformedVersionLabelError
from versions.domain.entities import ChangeType

INITIAL_LABEL = "1.0"

_LABEL_RE = re.compile(r"(\d+)\.(\d+)", re.ASCII)


def parse_label(label: str) -> tuple[int, int]:
    match = _LABEL_RE.fullmatch(label or "")
    if not match:
        raise MalformedVersionLabelError(label)
    return int(match.group(1)), int(match.group(2))


def next_label(current_label: str | None, change_type: ChangeType | str) -> str:
    """
    Compute the label that follows ``current_label``.

    The first version of a document is always "1.0", whatever the change type.
    A MAJOR change bumps the major number and resets minor; a MINOR change
    bumps minor.
    """
    change_type = ChangeType(change_type)
    if current_label is None:
        return INITIAL_LABEL

    major, minor = parse_label(current_label)
    if change_type is ChangeType.MAJOR:
        return f"{major + 1}.0"
    return f"{major}.{minor + 1}"
