"""
The user resource: validation, storage, service and HTTP routes.
"""
