"""
Core module - settings, logging and authentication.
"""
