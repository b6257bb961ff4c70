"""Functional apps of the showmen compliance portal."""
