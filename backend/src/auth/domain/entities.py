from collections.abc import Iterable
from dataclasses import dataclass, field


@dataclass(frozen=True)
class Subject:
    """The resolved caller: who they are and what the session grants them."""

    id: str
    roles: frozenset[str] = field(default_factory=frozenset)
    permission_codes: frozenset[str] = field(default_factory=frozenset)
    unit_ids: frozenset[str] = field(default_factory=frozenset)

    @classmethod
    def build(
        cls,
        id: str,
        roles: Iterable[str] = (),
        permission_codes: Iterable[str] = (),
        unit_ids: Iterable[str] = (),
    ) -> "Subject":
        return cls(
            id=str(id),
            roles=frozenset(roles),
            permission_codes=frozenset(permission_codes),
            unit_ids=frozenset(unit_ids),
        )
