"""
Core business logic for file management.

This module is framework-agnostic - it doesn't import FastAPI, boto3,
or any infrastructure concerns, so the file rules can be tested in
isolation.
"""
