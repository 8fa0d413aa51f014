"""
Limit Automation - Credit-Limit Decisioning Service

A FastAPI-based microservice that decides whether requested trade credit
limits can be auto-approved against a client's insurance policies, manages
the application lifecycle and renews expiring limits.
"""

__version__ = "0.1.0"
