from unittest.mock import MagicMock, patch

import pytest
from sqlalchemy.exc import OperationalError

from guidebook.core.exceptions import NotFoundException, ServiceException
from guidebook.services.base import BaseService


class _PingService(BaseService):
    @BaseService.measure_operation("ping")
    def ping(self, fail: bool = False) -> str:
        if fail:
            raise NotFoundException("missing")
        return "ok"


class TestTransaction:
    def test_commits_on_success(self):
        db = MagicMock()
        service = BaseService(db)
        with service.transaction():
            pass
        db.commit.assert_called_once()
        db.rollback.assert_not_called()

    def test_domain_errors_roll_back_and_propagate(self):
        db = MagicMock()
        service = BaseService(db)
        with pytest.raises(NotFoundException):
            with service.transaction():
                raise NotFoundException("gone")
        db.rollback.assert_called_once()
        db.commit.assert_not_called()

    def test_sqlalchemy_errors_become_service_exceptions(self):
        db = MagicMock()
        db.commit.side_effect = OperationalError("COMMIT", {}, Exception("database is locked"))
        service = BaseService(db)
        with pytest.raises(ServiceException):
            with service.transaction():
                pass
        db.rollback.assert_called_once()


class TestMeasureOperation:
    def test_records_success_and_failure(self):
        service = _PingService(MagicMock())
        assert service.ping() == "ok"
        with pytest.raises(NotFoundException):
            service.ping(fail=True)

        metrics = service.get_metrics()["ping"]
        assert metrics["count"] == 2
        assert metrics["success_count"] == 1
        assert metrics["failure_count"] == 1
        assert metrics["success_rate"] == 0.5

    def test_forwards_to_prometheus(self):
        service = _PingService(MagicMock())
        with patch("guidebook.services.base.prometheus_metrics") as metrics:
            service.ping()
        metrics.record_service_operation.assert_called_once()
        kwargs = metrics.record_service_operation.call_args.kwargs
        assert kwargs["service"] == "_PingService"
        assert kwargs["operation"] == "ping"
        assert kwargs["status"] == "success"

    def test_reset_metrics(self):
        service = _PingService(MagicMock())
        service.ping()
        service.reset_metrics()
        assert service.get_metrics() == {}
