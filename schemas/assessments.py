from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from schemas.enums import AssessmentType


class AssessmentCreate(BaseModel):
    course_id: str                                       # courses.id
    name: str                                            # 평가 이름
    type: AssessmentType                                 # QUIZ / ASSIGNMENT / MIDTERM / FINAL / PROJECT
    max_score: Decimal = Field(..., gt=0, max_digits=5, decimal_places=2)   # 만점
    weight: Decimal = Field(Decimal("1.00"), gt=0, max_digits=3, decimal_places=2)  # 가중치
    due_date: Optional[date] = None
    description: Optional[str] = None


class AssessmentUpdate(BaseModel):
    name: Optional[str] = None
    type: Optional[AssessmentType] = None
    max_score: Optional[Decimal] = Field(None, gt=0, max_digits=5, decimal_places=2)
    weight: Optional[Decimal] = Field(None, gt=0, max_digits=3, decimal_places=2)
    due_date: Optional[date] = None
    description: Optional[str] = None


class AssessmentOut(BaseModel):
    id: str
    course_id: str
    name: str
    type: AssessmentType
    max_score: float
    weight: float
    due_date: Optional[date] = None
    description: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
