"""
Persistence adapters.

These modules encapsulate how data is stored and retrieved (today a JSON
file). Services depend on the store objects rather than touching the file.
"""
