"""
ragpipe: PDF ingestion into a remote vector index for retrieval-augmented querying.

Splits page text into token-bounded chunks, embeds them through a remote
embedding service and upserts them into a namespaced similarity index.
"""

__version__ = "0.1.0"
