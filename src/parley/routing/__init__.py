"""Routing — pathname templates and the localized pathname compiler.

Templates are parsed once when the routing config is resolved and
reused read-only for every request.
"""
