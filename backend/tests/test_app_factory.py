import logging
from logging.handlers import TimedRotatingFileHandler
from ro_service import get_db
from ro_service.log_config import configure_logging


def test_session_is_replaced_after_app_context(app_instance):
    with app_instance.app_context():
        first = get_db()
        assert get_db() is first
    with app_instance.app_context():
        assert get_db() is not first


def test_session_is_replaced_between_requests(client):
    before = get_db()
    assert client.get('/healthz').status_code == 200
    assert get_db() is not before


def test_reconfiguring_closes_old_file_handler(app_instance, tmp_path):
    app_instance.config['LOG_FILE'] = str(tmp_path / 'ro_service.log')
    try:
        configure_logging(app_instance)
        pkg_logger = logging.getLogger('ro_service')
        old = [h for h in pkg_logger.handlers if isinstance(h, TimedRotatingFileHandler)]
        assert len(old) == 1
        configure_logging(app_instance)
        assert old[0] not in pkg_logger.handlers
        assert old[0].stream is None
        assert len([h for h in pkg_logger.handlers if isinstance(h, TimedRotatingFileHandler)]) == 1
    finally:
        app_instance.config['LOG_FILE'] = None
        configure_logging(app_instance)
