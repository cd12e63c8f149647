"""
mbucket: a curl-like command line client for an object-storage HTTP API.
"""

__version__ = '0.1.0'
