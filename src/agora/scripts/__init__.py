"""Maintenance scripts for the Agora application."""
