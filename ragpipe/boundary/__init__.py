"""
Boundary layer: clients for the remote embedding service and vector index.
"""
