from datetime import date, time

import pytest

from guidebook.core.enums import RoleName
from guidebook.services.employee_assignment_service import EmployeeAssignmentService
from tests.factories.scheduling_builders import (
    add_window,
    create_activity,
    create_booking,
    create_category,
    create_employee,
    create_user,
)

DAY = date(2024, 7, 1)


@pytest.fixture
def zip_line(db):
    adventure = create_category(db, "Adventure", max_per_guide=10)
    return create_activity(
        db,
        "Zip Line",
        adventure,
        location="Sinaia",
        duration_minutes=120,
        min_participants=2,
        max_participants=10,
    )


def test_zip_line_scenario(db, zip_line):
    ana = create_employee(db, "ana")
    add_window(db, ana, DAY, time(9, 0), time(17, 0))
    service = EmployeeAssignmentService(db)

    chosen = service.find_available_employee(DAY, time(9, 0), time(11, 0), zip_line, 4)
    assert chosen is not None and chosen.id == ana.id

    create_booking(db, zip_line, ana, DAY, time(9, 0), participants=4)
    assert service.find_available_employee(DAY, time(9, 0), time(11, 0), zip_line, 7) is None


def test_first_qualifying_employee_in_store_order(db, zip_line):
    ana = create_employee(db, "ana")
    bob = create_employee(db, "bob")
    service = EmployeeAssignmentService(db)

    assert service.find_available_employee(DAY, time(9, 0), time(11, 0), zip_line, 2).id == ana.id

    create_booking(db, zip_line, ana, DAY, time(9, 0), participants=10)
    assert service.find_available_employee(DAY, time(9, 0), time(11, 0), zip_line, 2).id == bob.id


def test_only_enabled_employees_are_considered(db, zip_line):
    create_user(db, "carla", roles=(RoleName.CUSTOMER,))
    create_user(db, "admin", roles=(RoleName.ADMIN,))
    create_employee(db, "dan", is_active=False)
    erin = create_employee(db, "erin")

    eligible = EmployeeAssignmentService(db).eligible_employees()
    assert [e.id for e in eligible] == [erin.id]


def test_no_employees_returns_none(db, zip_line):
    assert (
        EmployeeAssignmentService(db).find_available_employee(
            DAY, time(9, 0), time(11, 0), zip_line, 2
        )
        is None
    )
