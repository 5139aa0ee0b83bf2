"""
Sidebar components.
"""

from views.components.sidebar.cooking import render_cooking_sidebar

__all__ = ["render_cooking_sidebar"]
