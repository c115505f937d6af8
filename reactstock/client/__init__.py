"""
Python client for the ReactStock API.

Stock operations write through to the server and fall back to a local
JSON store when it is unreachable, so no history is lost while offline.
"""
from .api import ApiClient, ApiError
from .local_store import LocalStorage
from .recorder import TransactionRecorder
from . import history, stock

__all__ = ['ApiClient', 'ApiError', 'LocalStorage', 'TransactionRecorder', 'history', 'stock']
