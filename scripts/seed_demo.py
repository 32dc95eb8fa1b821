"""
Seed a demo organisation: one department, one employee per approver role,
EARNED/CASUAL/MEDICAL balances and a few holidays for the given year(s).
Existing rows are left unchanged.

Usage:
  python scripts/seed_demo.py              # seeds the current year
  python scripts/seed_demo.py 2026 2027   # seeds 2026 and 2027
"""
import sys
from datetime import date
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from leaveflow.core.logging import setup_logging
from leaveflow.db.init_db import init_db
from leaveflow.db.session import SessionLocal
from leaveflow.models.department import Department
from leaveflow.models.holiday import Holiday
from leaveflow.models.employee import Employee, Role
from leaveflow.models.leave import LeaveType
from leaveflow.services.balance_ledger import get_balance, provision_balance
from leaveflow.services.holiday_service import create_holiday

DEMO_EMPLOYEES = [
    ("EMP-001", "Demo Employee", Role.EMPLOYEE),
    ("DH-001", "Demo Department Head", Role.DEPT_HEAD),
    ("HRA-001", "Demo HR Admin", Role.HR_ADMIN),
    ("HRH-001", "Demo HR Head", Role.HR_HEAD),
    ("CEO-001", "Demo CEO", Role.CEO),
]

OPENING_DAYS = {
    LeaveType.EARNED: 30,
    LeaveType.CASUAL: 8,
    LeaveType.MEDICAL: 10,
}

# (month, day, name)
DEMO_HOLIDAYS = [
    (1, 1, "New Year's Day"),
    (5, 1, "Labour Day"),
    (12, 25, "Christmas Day"),
]


def main():
    setup_logging()
    years = [int(y) for y in sys.argv[1:]] or [date.today().year]
    init_db()

    db = SessionLocal()
    try:
        department = db.query(Department).filter(Department.name == "Operations").first()
        if department is None:
            department = Department(name="Operations", active=True)
            db.add(department)
            db.flush()

        employees = []
        for emp_code, name, role in DEMO_EMPLOYEES:
            employee = db.query(Employee).filter(Employee.emp_code == emp_code).first()
            if employee is None:
                employee = Employee(
                    emp_code=emp_code,
                    name=name,
                    role=role.value,
                    department_id=department.id,
                    join_date=date(2018, 1, 1),
                    active=True,
                )
                db.add(employee)
                db.flush()
            employees.append(employee)

        db.commit()

        for year in sorted(years):
            for month, day, name in DEMO_HOLIDAYS:
                holiday_date = date(year, month, day)
                if db.query(Holiday).filter(Holiday.date == holiday_date).first() is None:
                    create_holiday(db, year=year, holiday_date=holiday_date, name=name)

        for year in sorted(years):
            for employee in employees:
                for leave_type, opening in OPENING_DAYS.items():
                    if get_balance(db, employee.id, leave_type, year) is None:
                        provision_balance(db, employee.id, leave_type, year, opening=opening)
        db.commit()

        for employee in employees:
            print(f"{employee.emp_code}: id={employee.id} role={employee.role}")
    finally:
        db.close()


if __name__ == "__main__":
    main()
