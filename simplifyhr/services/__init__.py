"""
Services module - business logic, AI integration and pure helpers.
"""
