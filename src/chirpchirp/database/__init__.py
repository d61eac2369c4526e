"""Database package for ChirpChirp.

Database components should be imported directly from their modules:
from chirpchirp.database.core import CoreDatabaseService
"""
