"""Attendance Engine package.

Feature modules (attendance, imports, schedules, calendars, payroll) follow the
same service/repository split; Flask and MySQL live at the edges only.
"""
