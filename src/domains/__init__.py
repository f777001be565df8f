# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Domain services layer.

Each domain module exposes a service bound to a database session and the
acting tenant context. Public operations return ``Result`` values.

Domains:
    auth: Login, tokens and tenant context resolution.
    school: Tenant registration, branches, settings and period planning.
    class_: Classes and class statistics.
    section: Sections and occupancy.
    subject: Subjects, chapters and lessons.
    timetable: Timetable slots and overlap rules.
    student: Students and roll numbers.
    admission: Combined parent and student admission.
    teacher: Teachers.
    parent: Parents and guardians.
    staff: Non-teaching staff.
    attendance: Daily student attendance.
"""
