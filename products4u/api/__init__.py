"""FastAPI application module for Products4U.

This module contains the FastAPI application factory, route handlers and
the ambient concerns around them: settings, logging and error rendering.
"""
