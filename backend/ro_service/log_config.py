"""Logging setup for the Flask app logger.

Console output always; a daily rotating file (14 days kept) when LOG_FILE is
configured. Module loggers under ``ro_service.*`` share the same handlers.
"""
import logging
from logging.handlers import TimedRotatingFileHandler

LOG_FORMAT = '%(asctime)s %(levelname)s %(name)s: %(message)s'


def configure_logging(app):
    level = logging.getLevelName(str(app.config.get('LOG_LEVEL', 'INFO')).upper())
    if not isinstance(level, int):
        level = logging.INFO
    formatter = logging.Formatter(LOG_FORMAT)
    handlers = [logging.StreamHandler()]
    log_file = app.config.get('LOG_FILE')
    if log_file:
        handlers.append(TimedRotatingFileHandler(log_file, when='midnight', backupCount=14, encoding='utf-8'))
    pkg_logger = logging.getLogger('ro_service')
    for existing in list(pkg_logger.handlers):
        pkg_logger.removeHandler(existing)
        existing.close()
    for handler in handlers:
        handler.setFormatter(formatter)
        pkg_logger.addHandler(handler)
    pkg_logger.setLevel(level)
    app.logger.setLevel(level)
    return pkg_logger
