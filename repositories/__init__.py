"""
repositories/ - Data Access Layer
==================================
Each repository encapsulates all SQL queries for a specific domain entity.
Repositories receive an open `db.Database` executor and return domain model
objects or plain row dicts.
"""
