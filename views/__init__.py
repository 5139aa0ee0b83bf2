"""
Views layer - UI presentation components.
"""

from views.cooking_view import CookingView

__all__ = ["CookingView"]
