"""
Growin Indexer Console - operator client for the indexing service
"""

__version__ = "1.0.0"
