"""
Application wiring: lifespan, CORS, middlewares and tenant resolution.
"""
