"""
Core business logic for product images.

This module is framework-agnostic - it doesn't import FastAPI, boto3,
or any infrastructure concerns. Storage backends are reached only through
the protocols declared in images.resolver.
"""
