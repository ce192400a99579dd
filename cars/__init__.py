"""cars/ -- The car catalogue: domain models, SQL store, and ownership-aware directory.

Layer rule: cars/ may import from core/ and auth.models (for the acting
user). It does NOT import from api/ or web/.
"""
