"""Shared builders for reservation test data."""

STAFF = 'Staff Member 1'


def suite_data(start='2024-01-05T15:00:00', end='2024-01-07T11:00:00', **overrides):
    data = {
        'rented_to': '1204',
        'resource_type': 'GUEST_SUITE',
        'item': 'Guest Suite',
        'start_time': start,
        'end_time': end,
    }
    data.update(overrides)
    return data


def lounge_data(start='2024-01-05T12:00:00', **overrides):
    data = {
        'rented_to': '802',
        'resource_type': 'SKY_LOUNGE',
        'start_time': start,
    }
    data.update(overrides)
    return data


def gear_data(items, start='2024-01-05T09:00:00', end='2024-01-05T17:00:00', **overrides):
    data = {
        'rented_to': '310',
        'resource_type': 'GEAR_SHED',
        'items': items,
        'start_time': start,
        'end_time': end,
    }
    data.update(overrides)
    return data
