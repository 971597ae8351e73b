"""
Scheduler API routes package.
Split into smaller modules by entity:
- items.py - Resource catalog
- staff.py - Staff directory
- reservations.py - Reservation lifecycle and listing
- pricing.py - Cost quotes
"""

from flask import Blueprint

# Create the scheduler blueprint (mounted under /api)
scheduler_bp = Blueprint('scheduler', __name__)

# Import and register routes from submodules
from blueprints.scheduler import items
from blueprints.scheduler import staff
from blueprints.scheduler import reservations
from blueprints.scheduler import pricing

# Register all route functions on the blueprint
items.register_routes(scheduler_bp)
staff.register_routes(scheduler_bp)
reservations.register_routes(scheduler_bp)
pricing.register_routes(scheduler_bp)
