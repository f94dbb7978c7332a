from fastapi import APIRouter, Depends

from auth.domain.entities import Subject
from auth.interfaces.schemas import SubjectResponse
from shared.dependencies import get_current_subject

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.get("/me", response_model=SubjectResponse)
async def me(subject: Subject = Depends(get_current_subject)):
    return SubjectResponse.from_subject(subject)
