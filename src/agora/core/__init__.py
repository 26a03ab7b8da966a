"""Core configuration for the Agora application."""
