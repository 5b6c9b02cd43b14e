import logging
from ro_service.services.notifications import Notifier, notify, TASK_ASSIGNED


def test_notifier_fans_out_and_survives_failures(caplog):
    seen = []
    notifier = Notifier()
    notifier.register(lambda t, k, p: seen.append((t, k, p)))

    def broken(t, k, p):
        raise ConnectionError('gateway timeout')
    notifier.register(broken)
    notifier.register(lambda t, k, p: seen.append(('second', k)))
    with caplog.at_level(logging.ERROR):
        delivered = notifier.notify(7, TASK_ASSIGNED, {'task_id': 1})
    assert delivered == 2
    assert seen == [(7, TASK_ASSIGNED, {'task_id': 1}), ('second', TASK_ASSIGNED)]
    assert any('failed' in r.getMessage() for r in caplog.records)


def test_notify_without_target_is_noop(app_context, sink_events):
    assert notify(None, TASK_ASSIGNED, {}) == 0
    assert sink_events == []


def test_default_log_sink_registered(app_context, caplog):
    with caplog.at_level(logging.INFO, logger='ro_service'):
        notify(42, 'TASK_COMPLETED', {'task_id': 3})
    assert any('event=TASK_COMPLETED' in r.getMessage() for r in caplog.records)
