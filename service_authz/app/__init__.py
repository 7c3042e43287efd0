"""
Authorization service package for the Access Layer.

Decides whether a principal may perform an action on a resource under a
tenant. It provides:

- app.domain: Immutable principal, resource, group and decision records.
- app.tenancy: Tenant membership gate.
- app.directory: Introducer group directory (immutable snapshots).
- app.rules: Ordered allow rules and the tenant-gated policy evaluator.
- app.resources: Resource lookup and the in-memory account store.
- app.pipeline: The gate chain composing all of the above.
- app.main: HTTP surface (checks, protected account endpoint, health).

Guidelines:
- Authorization misses are return values, never exceptions.
- Fail closed: missing data denies.
- Shared state is read-only; reloads swap whole snapshots.
"""
