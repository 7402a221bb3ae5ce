"""Authentication and authorization.

Users register and log in with email/password and receive a signed
JWT carrying their claims and roles. Protected routes read the bearer
token; the delete-supplier route additionally requires a named claim,
checked by a policy from auth.policies.
"""
