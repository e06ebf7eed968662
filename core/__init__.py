"""core/ -- Kernel: configuration, database engine, and the ownership gate.

Layer rule: core/ has no reverse dependencies. It may not import from api/,
auth/, or cameras/.
"""
