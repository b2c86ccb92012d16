"""Journey primitives (failure formulas, random sources, events and errors).

Kept free of FastAPI and Redis concerns so the controller can be driven from
API routes, scripts, and tests alike.
"""
