"""
Google Cloud Vision access for the annotation relay.

This package exposes:
- `schemas` : pydantic models for the `images:annotate` request body
- `client`  : the `AnnotationClient` capability and its REST implementation
"""
