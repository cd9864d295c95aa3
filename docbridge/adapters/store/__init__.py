"""Document store adapters.

Implementations of DocumentStorePort:
- MongoDB (pymongo AsyncMongoClient)
"""

from .mongodb import MongoDocumentStore

__all__ = ["MongoDocumentStore"]
