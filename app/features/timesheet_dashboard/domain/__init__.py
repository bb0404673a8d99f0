"""
Domain layer for the timesheet dashboard feature.
"""
