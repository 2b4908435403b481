"""Core services: configuration, logging and exceptions."""
