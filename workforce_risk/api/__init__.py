"""
API package for Workforce Risk.

Contains:
- schemas: Request and response models
- routes: FastAPI router and the create_app() factory
"""
