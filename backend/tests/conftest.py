import os, sys, pytest
# Ensure backend directory is on path so 'ro_service' can be imported
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)
from ro_service import create_app, get_db
from ro_service.models.accounts import Base
# Import all model modules to ensure tables are registered before create_all
import ro_service.models.customer  # noqa: F401
import ro_service.models.service  # noqa: F401
import ro_service.models.task  # noqa: F401
import ro_service.models.bill  # noqa: F401
import ro_service.models.complaint  # noqa: F401
import ro_service.models.audit  # noqa: F401

@pytest.fixture(scope='session', autouse=True)
def app_instance():
    app = create_app({
        'DATABASE_URL': 'sqlite+pysqlite:///:memory:',
        'JWT_SECRET_KEY': 'test-secret-key-with-enough-length-for-hs256',
        'TESTING': True,
    })
    # After app and blueprints are registered, ensure all tables exist
    with app.app_context():
        engine = get_db().get_bind()
        Base.metadata.create_all(engine)
    yield app

@pytest.fixture()
def app_context(app_instance):
    with app_instance.app_context():
        yield app_instance

@pytest.fixture()
def client(app_instance):
    return app_instance.test_client()

@pytest.fixture()
def sink_events(app_instance):
    """Capture every notification sent during the test."""
    events = []
    notifier = app_instance.extensions['notifier']
    sink = notifier.register(lambda target, kind, payload: events.append((target, kind, payload)))
    yield events
    notifier._sinks.remove(sink)
