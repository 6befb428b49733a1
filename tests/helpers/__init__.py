"""Shared test doubles for the hopen test suite."""
