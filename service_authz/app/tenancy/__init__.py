"""
Tenant isolation checks that run before any resource is touched.
"""
