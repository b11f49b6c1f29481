"""
Campaign management: CRUD over campaigns scoped to their owner.
"""
