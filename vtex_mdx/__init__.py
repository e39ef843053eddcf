"""VTEX MasterData export tool.

Retrieves complete record sets from MasterData entities across the V1
scroll/search and V2 schema-based search APIs.
"""

__version__ = "0.3.0"
