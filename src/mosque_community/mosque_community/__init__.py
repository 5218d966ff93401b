"""Mosque Community package.

This package is organized by feature modules (users, areas, prayers, pickups,
feeds, ...) with a thin Flask controller layer over service and repository
layers. Services receive the authenticated ``Principal`` explicitly.
"""
