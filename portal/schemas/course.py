from pydantic import BaseModel
from typing import Optional
from datetime import datetime
from portal.schemas.user import UserInfo

class CourseCreate(BaseModel):
    title: str
    description: Optional[str] = None

class CourseJoin(BaseModel):
    accessCode: str

class CourseRef(BaseModel):
    id: int
    title: str

class Course(BaseModel):
    id: int
    title: str
    description: Optional[str] = None
    accessCode: str
    createdBy: UserInfo
    createdAt: Optional[datetime] = None
    studentCount: int
