"""
Infrastructure Layer

HTTP transport and upstream provider adapters.
"""
