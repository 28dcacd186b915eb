"""School administration package.

Organized by feature modules (schedules, calendar, attendance, reports, ...)
with a thin Flask controller layer over service/repository layers.
"""
