"""Coworking offices API."""
