"""
Staff directory API endpoints.
"""

from flask import request

from models.staff import get_all_staff, create_staff
from utils.api_response import api_success
from utils.messages import get_message


def register_routes(bp):
    """Register staff routes on the blueprint."""

    @bp.route('/staff', methods=['GET'])
    def list_staff():
        """List staff members (active only unless ?active=false)."""
        active_only = request.args.get('active', 'true').lower() == 'true'
        staff = get_all_staff(active_only=active_only)
        return api_success(data=staff, count=len(staff))

    @bp.route('/staff', methods=['POST'])
    def add_staff():
        """Add a staff member. Request JSON: {"name": "Staff Member 3"}"""
        data = request.get_json(silent=True) or {}
        staff_id = create_staff(data.get('name'))
        name = str(data['name']).strip()
        return api_success(
            data={'id': staff_id, 'name': name},
            message=get_message('staff_created', name=name),
            status=201
        )
