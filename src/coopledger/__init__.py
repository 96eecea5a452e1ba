# src/coopledger/__init__.py
# Copyright (c)
# SPDX-License-Identifier: MIT
"""Cooperative financial report consistency and lifecycle engine."""

__version__ = "0.1.0"
