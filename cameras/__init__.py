"""cameras/ -- Camera and alert records, every read and write scoped to the owning user.

Layer rule: cameras/ imports from core/ only. It does NOT import from api/ or auth/.
"""
