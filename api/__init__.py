"""
FlatDB REST API
"""
