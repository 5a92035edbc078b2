"""Service layer.

All domain logic and database access lives in these modules; routes only
parse input and call exactly one service function.
"""
