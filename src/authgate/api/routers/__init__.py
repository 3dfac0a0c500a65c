"""
authgate.api.routers

HTTP routers.
"""
