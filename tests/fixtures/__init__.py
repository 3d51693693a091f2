"""Importable classes used as container services in tests."""
