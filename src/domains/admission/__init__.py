# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Admission domain: combined student and parent admission."""

from src.domains.admission.service import (
    AdmissionError,
    AdmissionService,
    field_label,
    generate_application_no,
)

__all__ = [
    "AdmissionService",
    "AdmissionError",
    "field_label",
    "generate_application_no",
]
