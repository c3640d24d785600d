"""Cutout service application package."""
