"""
MongoDB bootstrap for the tipster services.

Creates the named indexes of the application databases and provisions
their application users. Run with: python -m mongo_init
"""

__version__ = "1.0.0"
