"""auth/ -- Users, login tokens, and the request auth gate for carshop.

Layer rule: auth/ imports only stdlib, third-party libraries, and core/.
It does NOT import from api/, web/, or cars/.
api/ imports from auth/, not the other way around.
"""
