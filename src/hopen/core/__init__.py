"""Core server lifecycle, process and configuration modules for hopen."""
