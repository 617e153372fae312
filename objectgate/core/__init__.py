"""
Core logic for object access.

This module is framework-agnostic - it doesn't import FastAPI or boto3.
It talks to the object store only through the ObjectStoreClient protocol,
so it can be tested against the in-memory client.
"""
