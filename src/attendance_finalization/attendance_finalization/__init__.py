"""Attendance Finalization package.

Feature modules (attendance, shifts, finalization, notifications, ...) each keep
a Protocol repository, a MySQL implementation and the service logic on top.
The finalization module turns live clock activity into final daily records.
"""
