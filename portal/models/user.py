from sqlalchemy import Column, Integer, String, DateTime
from portal.db.base_class import Base
from portal.grading.engine import utcnow

ROLES = ("student", "faculty", "admin")

class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False)
    email = Column(String(100), unique=True, index=True, nullable=False)
    role = Column(String(20), nullable=False, default="student")
    created_at = Column(DateTime, default=utcnow)
