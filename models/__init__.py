"""
models/ - Domain Models
=======================
Plain dataclasses for users, property listings and listing filters.
"""
