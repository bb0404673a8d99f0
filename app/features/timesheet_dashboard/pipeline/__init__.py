"""
Processing pipeline for timesheet line items.
"""
