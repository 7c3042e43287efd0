"""
Rules package.

Defines the allow rules and the evaluator that applies them:

- models: Rule, TenantContext and EvaluationResult.
- predicates: Built-in rules (elevated role, ownership, group delegation).
- engine: Tenant gate, action/kind filter and first-match evaluation.

The rule table is an ordered list of named predicates, so new rules can be
added (or loaded from configuration) without touching the evaluator.
"""
