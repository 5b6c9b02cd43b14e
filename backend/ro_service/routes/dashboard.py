from flask import Blueprint
from ro_service import get_db
from ro_service.decorators.auth import require_permissions
from ro_service.services.dashboard import technician_dashboard
from ro_service.services.policy import current_technician_id

dash_bp = Blueprint('dashboard', __name__)


@dash_bp.get('')
@require_permissions('DASH.READ')
def dashboard():
    return technician_dashboard(get_db(), current_technician_id())
