"""auth/ -- Authentication package for Skylark.

Layer rule: auth/ imports only stdlib, third-party libraries, and core/.
It does NOT import from api/ or cameras/.
api/ imports from auth/, not the other way around.
"""
