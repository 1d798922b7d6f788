from datetime import date, time

from guidebook.services.work_hour_service import WorkHourService
from tests.factories.scheduling_builders import create_employee


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["checks"] == {"database": True}


def test_live(client):
    assert client.get("/live").json() == {"ok": True}


def test_metrics_exposes_service_timings(client, db):
    ana = create_employee(db, "ana")
    WorkHourService(db).add_work_window(ana.id, date(2030, 7, 15), time(9, 0), time(10, 0))

    response = client.get("/metrics")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/plain")
    assert "guidebook_service_operations_total" in response.text
    assert 'operation="add_work_window"' in response.text
