# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Display paths invalidated after mutations.

Services name the dashboard pages whose server-rendered data went stale;
subscribers (page caches, websocket fan-out) decide what to do with it.
"""


class DashboardPaths:
    """Dashboard paths by area."""

    ADMISSIONS = "/dashboard/admissions"
    ATTENDANCE = "/dashboard/attendance"
    BRANCHES = "/dashboard/branches"
    CLASSES = "/dashboard/classes"
    PARENTS = "/dashboard/parents"
    ROUTINES = "/dashboard/class-routine"
    SETTINGS = "/dashboard/settings"
    STAFF = "/dashboard/staff"
    STUDENTS = "/dashboard/students"
    SUBJECTS = "/dashboard/subjects"
    TEACHERS = "/dashboard/teachers"
    TIMETABLES = "/dashboard/timetables"

    ALL = "/dashboard/*"
