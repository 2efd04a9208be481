"""Kernel – error hierarchy and transport-agnostic messaging primitives."""
