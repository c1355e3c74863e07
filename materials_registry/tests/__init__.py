# materials_registry/tests/__init__.py
"""
Materials Registry Tests

Run:
    pytest materials_registry/tests
"""
