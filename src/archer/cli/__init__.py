"""Archer command-line interface."""
