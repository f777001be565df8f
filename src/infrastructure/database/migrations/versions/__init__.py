# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Schema migrations.

Contains migrations for the shared, tenant-partitioned schema:
- School structure (schools, branches, schedules, settings)
- People (users, profiles, teachers, parents, students, staff)
- Academics (classes, sections, subjects, chapters, lessons, timetables)
- Records (attendance, staff attendance, fees)
"""
