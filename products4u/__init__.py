"""Products4U: REST service for product boycott queries and recommendations.

This package provides a backend service exposing CRUD-style endpoints over
two MongoDB collections: user-submitted product queries and the alternative
product recommendations made for them.

Modules:
    api: FastAPI application and REST API endpoints
    storage: Persistence gateway over the MongoDB collections
"""

__version__ = "0.1.0"
