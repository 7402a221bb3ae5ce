"""Fornecedores — supplier registry API.

CRUD over supplier ("fornecedor") records, with email/password
registration and login that issue JWT bearer tokens, and a claim
policy guarding supplier deletion.
"""

__version__ = "0.1.0"
