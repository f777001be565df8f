# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Core package for the school backend.

This package contains shared building blocks used by every domain:
- config: Application configuration and settings
- result: Ok/Err result type and response envelope
- errors: Service error taxonomy and the operation boundary decorator
"""
