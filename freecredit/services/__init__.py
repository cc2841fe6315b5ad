"""Services Layer — SQL stores and the reaction service that orchestrates them.

Invariants:
    - Stores flush, the service commits: one commit per logical operation
"""
