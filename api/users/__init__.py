"""
Users feature: data model, store and REST routes.
"""
