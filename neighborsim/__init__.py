"""
neighborsim - in-memory BGP session-state engine and simulator
"""

__version__ = "0.1.0"
