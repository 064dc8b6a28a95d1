"""
Service layer for business logic implementation.
Services are imported from their modules directly; models depend on the pricing module.
"""
