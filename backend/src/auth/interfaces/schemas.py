from pydantic import BaseModel

from auth.domain.entities import Subject


class SubjectResponse(BaseModel):
    id: str
    roles: list[str]
    permissions: list[str]
    units: list[str]

    @classmethod
    def from_subject(cls, subject: Subject) -> "SubjectResponse":
        return cls(
            id=subject.id,
            roles=sorted(subject.roles),
            permissions=sorted(subject.permission_codes),
            units=sorted(subject.unit_ids),
        )
