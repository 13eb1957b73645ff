"""
Semisto website backend
Database instance and submission-record models.

The catalog itself is never stored here: entities come from the remote
catalog API or the bundled JSON snapshot. Only what users submit (orders,
donations, funding allocations, package interest, contact messages) is
persisted.
"""

from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()
