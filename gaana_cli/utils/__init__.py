"""
Utility helpers shared across the application.
"""
