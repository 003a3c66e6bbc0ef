"""
Integration Tests Package

End-to-end scenarios composing every layer of the contract algebra.

TEST AXIOMS:
=============
1. Contracts compose: combinators only consume and produce contracts
2. Explicit failure: invalid values never reach guarded code
3. Identity policy: copy vs in-place behavior is visible to callers
"""
