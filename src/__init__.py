"""Aamar School backend.

Multi-tenant school management: tenant-scoped data access and business
rules for schools, branches, classes, sections, subjects, timetables,
teachers, students, parents and staff.

Copyright (C) 2025 Global Digital Labs (gdlabs.io)
SPDX-License-Identifier: LGPL-3.0-or-later
"""

__version__ = "1.0.0"
