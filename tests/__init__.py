"""
Component tests for the Storefront API

These tests drive the FastAPI routes end to end against an in-memory
MongoDB (mongomock) and a fake media store, with real signed session tokens.
"""
