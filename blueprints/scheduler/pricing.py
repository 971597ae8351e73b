"""
Pricing API endpoints for cost previews.
"""

from datetime import timedelta, timezone

from flask import request

from models.errors import ValidationFailed
from models.policy import get_policy
from models.pricing import compute_cost, format_price
from models.scheduler_types import SKY_LOUNGE, normalize_resource_type
from utils.api_response import api_success
from utils.datetime_helpers import parse_datetime


def register_routes(bp):
    """Register pricing API routes on the blueprint."""

    @bp.route('/pricing/quote', methods=['POST'])
    def quote():
        """
        Price a time range without checking availability.

        Request JSON:
        {
            "resource_type": "GUEST_SUITE",
            "start_time": "2024-01-05T15:00:00",
            "end_time": "2024-01-07T11:00:00"   (ignored for Sky Lounge)
        }

        Response data:
        {
            "total": 350.0,
            "total_display": "$350.00",
            "nights": 2,
            "breakdown": "Fri: $175.00, Sat: $175.00",
            "cancellation_fee": 75.0
        }
        """
        data = request.get_json(silent=True) or {}
        policy = get_policy()
        errors = []

        resource_type = normalize_resource_type(data.get('resource_type'))
        if not resource_type:
            errors.append(f"Unknown resource type: {data.get('resource_type')}")

        try:
            start = parse_datetime(data.get('start_time'), policy.tz)
            if start:
                start = start.astimezone(timezone.utc)
            if resource_type == SKY_LOUNGE and start:
                end = start + timedelta(hours=policy.sky_lounge_block_hours)
            else:
                end = parse_datetime(data.get('end_time'), policy.tz)
        except (ValueError, TypeError):
            start = end = None
            errors.append('Start/end date/time is not a valid date')

        if not errors and (start is None or end is None):
            errors.append('Start and end date/time are required')
        elif start and end and start >= end:
            errors.append('Start time must be before end time')

        if errors:
            raise ValidationFailed(errors)

        price = compute_cost(resource_type, start, end, policy)
        price['total_display'] = format_price(price['total'])
        price['cancellation_fee'] = policy.cancellation_fee_for(resource_type)
        return api_success(data=price)
