"""Shared domain services."""
