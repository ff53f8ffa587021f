"""Boundary schemas for attendance payroll payloads."""
