# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Pydantic request models consumed by the domain services.

Required-field and format rules that produce user-facing messages are
enforced by the services, so most fields here are optional.
"""
