"""
Placipy - placement training assessment platform.

Architecture:
- MongoDB: PK/SK keyed tables (assessments, legacy questions, tenant data)
- Judge0: sandboxed execution of programming answers
- Identity: bearer-token claims from an external provider
"""

__version__ = "1.0.0"
