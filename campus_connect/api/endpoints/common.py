from fastapi import APIRouter
from typing import List
from pydantic import BaseModel

from campus_connect.core.constants import DEPARTMENT_LABELS

router = APIRouter(
    prefix="/api/common",
    tags=["Common / Metadata"]
)


class DeptOption(BaseModel):
    code: str
    name: str


# ----------------------------------------------------------
# DEPARTMENTS (sign-up dropdown)
# ----------------------------------------------------------
@router.get("/departments", response_model=List[DeptOption])
async def get_departments():
    return [DeptOption(code=code.value, name=name) for code, name in DEPARTMENT_LABELS.items()]
