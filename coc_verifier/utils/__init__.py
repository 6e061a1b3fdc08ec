"""Utility modules for configuration, logging, errors and date parsing."""
