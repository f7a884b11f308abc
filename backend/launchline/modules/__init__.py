"""
Application modules package.

This package contains the feature modules of the application.
"""
