"""Read side of the maintenance history trail (writes live in models.history)."""
from gearguard.models.history import MaintenanceHistory
from gearguard.utils.helpers import degrade_on_store_error


def _newest_first(q):
    return q.order_by(MaintenanceHistory.created_at.desc(), MaintenanceHistory.id.desc())


@degrade_on_store_error(list)
def get_history_by_request(request_id):
    return _newest_first(MaintenanceHistory.query.filter_by(request_id=request_id)).all()


@degrade_on_store_error(list)
def get_history_by_equipment(equipment_id):
    """Every recorded action across all requests against one asset."""
    return _newest_first(MaintenanceHistory.query.filter_by(equipment_id=equipment_id)).all()
