"""xbs - a synchronization backend for xBrowserSync clients.

Stores opaque, client-encrypted bookmark blobs keyed by a server-generated
ID and guards updates with optimistic concurrency.
"""

__version__ = "1.1.13"

__all__ = ["__version__"]
