"""Boundary adapters for external systems (relational store)."""
