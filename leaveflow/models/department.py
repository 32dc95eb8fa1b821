"""
Department model

Department heads are found through ``Employee.role`` and ``department_id``;
there is no separate head pointer on the department row.
"""
from sqlalchemy import Boolean, Column, DateTime, Integer, String, text
from sqlalchemy.orm import relationship

from leaveflow.db.base import Base


class Department(Base):
    __tablename__ = "departments"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, unique=True, nullable=False, index=True)
    active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=text("CURRENT_TIMESTAMP"), nullable=False)

    employees = relationship("Employee", back_populates="department", order_by="Employee.id")

    def __repr__(self) -> str:
        return f"<Department id={self.id} name={self.name!r}>"
