"""
Resource catalog API endpoints.
"""

from flask import request

from models.errors import NotFound
from models.scheduler_item import get_items, get_item_by_id, create_item, update_item
from utils.api_response import api_success
from utils.messages import get_message


def register_routes(bp):
    """Register catalog routes on the blueprint."""

    @bp.route('/items', methods=['GET'])
    def list_items():
        """
        List catalog items.

        Query params:
            resource_type: Filter by resource type (optional)
            in_service: 'true' to only return items in service (optional)
        """
        resource_type = request.args.get('resource_type')
        only_in_service = request.args.get('in_service', 'false').lower() == 'true'

        items = get_items(resource_type=resource_type, only_in_service=only_in_service)
        return api_success(data=items, count=len(items))

    @bp.route('/items', methods=['POST'])
    def add_item():
        """
        Add a catalog item.

        Request JSON:
        {
            "item_id": "kayak-3",
            "item": "Kayak 3",
            "resource_type": "GEAR_SHED",
            "description": "...",
            "service_status": "In Service",
            "service_notes": ""
        }
        """
        data = request.get_json(silent=True) or {}
        item = create_item(
            item_id=data.get('item_id'),
            item=data.get('item'),
            resource_type=data.get('resource_type'),
            description=data.get('description'),
            service_status=data.get('service_status') or 'In Service',
            service_notes=data.get('service_notes')
        )
        return api_success(data=item, message=get_message('item_created', item=item['item']), status=201)

    @bp.route('/items/<item_id>', methods=['GET'])
    def item_detail(item_id):
        """Get a single catalog item."""
        item = get_item_by_id(item_id)
        if not item:
            raise NotFound(f'Item {item_id} not found')
        return api_success(data=item)

    @bp.route('/items/<item_id>', methods=['PATCH'])
    def edit_item(item_id):
        """Update name, description or service status of an item."""
        data = request.get_json(silent=True) or {}
        fields = {k: v for k, v in data.items() if k != 'item_id'}
        item = update_item(item_id, **fields)
        return api_success(data=item, message=get_message('item_updated', item=item['item']))
