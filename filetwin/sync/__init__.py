"""
Event-driven synchronization of the two files.
"""

from .engine import EngineState, SyncEngine, SyncOutcome, SyncStats

__all__ = ['EngineState', 'SyncEngine', 'SyncOutcome', 'SyncStats']
