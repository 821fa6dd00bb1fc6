"""
Todo RBAC Server - Routes Package

One APIRouter per module; server.py includes them all.
"""
