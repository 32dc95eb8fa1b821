"""
Employee model
"""
from sqlalchemy import Column, Integer, String, Boolean, DateTime, Date, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import enum
from leaveflow.db.base import Base


class Role(str, enum.Enum):
    EMPLOYEE = "EMPLOYEE"
    DEPT_HEAD = "DEPT_HEAD"
    HR_ADMIN = "HR_ADMIN"
    HR_HEAD = "HR_HEAD"
    CEO = "CEO"
    SYSTEM_ADMIN = "SYSTEM_ADMIN"


class Employee(Base):
    __tablename__ = "employees"

    id = Column(Integer, primary_key=True, index=True)
    emp_code = Column(String, unique=True, nullable=False, index=True)
    name = Column(String, nullable=False)
    email = Column(String, nullable=True)
    role = Column(String, nullable=False, default=Role.EMPLOYEE.value, index=True)
    department_id = Column(Integer, ForeignKey("departments.id"), nullable=True, index=True)
    join_date = Column(Date, nullable=False)
    retirement_date = Column(Date, nullable=True)
    active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.current_timestamp(), nullable=False)

    department = relationship("Department", back_populates="employees")
    leave_requests = relationship("LeaveRequest", back_populates="requester")

    @property
    def role_enum(self) -> Role:
        return Role(self.role)
