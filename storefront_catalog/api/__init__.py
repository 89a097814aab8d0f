"""
HTTP routes for store registration and product retrieval
"""
