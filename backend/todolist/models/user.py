"""SQLAlchemy model for application users."""

from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from todolist.database import Base


class User(Base):
    __tablename__ = "users"

    user_id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(50), unique=True, nullable=False)
    first_name = Column(String(50))
    last_name = Column(String(50))
    department_id = Column(Integer, ForeignKey("departments.department_id"), nullable=True)
    role_id = Column(Integer, ForeignKey("roles.role_id"), nullable=True)
    hashed_password = Column(String(255), nullable=False)
    must_change_password = Column(Boolean, default=False, nullable=False)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, server_default=func.now())

    department = relationship("Department")
    role = relationship("Role")

    @property
    def department_name(self):
        return self.department.name if self.department else None

    @property
    def role_name(self):
        return self.role.name if self.role else None

    @property
    def screen_name(self):
        if (self.first_name or "").strip() and (self.last_name or "").strip():
            return f"{self.first_name} {self.last_name}"
        return self.username
