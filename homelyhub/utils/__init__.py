"""
Utility modules for the HomelyHub API: exceptions, validators, tokens, file checks and query parsing.
"""
