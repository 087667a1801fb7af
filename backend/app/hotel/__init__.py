"""
app/hotel/__init__.py

Hotel front-end route table and navigation
"""

from app.hotel.routes import ROUTE_REQUIREMENTS, NAVIGATION, requirement_for, navigation_for

# Export
__all__ = ["ROUTE_REQUIREMENTS", "NAVIGATION", "requirement_for", "navigation_for"]
