"""
Core utilities: application exceptions and account identifier validation.
"""
