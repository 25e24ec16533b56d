"""
Student Gateway
Request-dispatch gateway between the student web client and the backend service
"""

__version__ = "1.0.0"
