"""
SchedPlanner – turn spreadsheet/CSV schedule exports into calendar events.
"""
