from structlog.testing import capture_logs

from customer_service.logger import get_logger


def test_named_logger_binds_name():
    log = get_logger("customer_service.service")
    with capture_logs() as logs:
        log.info("customer_created", customer_id=1)

    assert logs == [
        {
            "logger": "customer_service.service",
            "event": "customer_created",
            "customer_id": 1,
            "log_level": "info",
        }
    ]


def test_unnamed_logger():
    log = get_logger()
    with capture_logs() as logs:
        log.warning("notification_failed")

    assert logs[0]["event"] == "notification_failed"
    assert "logger" not in logs[0]
