# Middleware package init
"""
Gatherly Backend — Middleware Package
=======================================

Execution order for an incoming request (see create_app in main.py):

    Rate Limit → Request ID → Access Log → GZip → CORS → route

Rate limiting rejects before anything else runs. The request ID is set
before the access log line is written, so that line carries it too.
"""
