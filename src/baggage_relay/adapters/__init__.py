"""Adapters – transport integrations that carry a TraceContext across process boundaries.

Every adapter imports its third-party library lazily and raises
``ImportError`` with an install hint when the matching extra is missing.
"""
