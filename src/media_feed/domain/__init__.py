"""
Domain Layer

Pure business objects with no I/O.
"""
