"""
FastAPI routers grouped by resource.

Each module in this package exposes an APIRouter that the application
factory (app.py) includes. Endpoint definitions stay close to the use cases
they call.
"""
