"""Pure domain logic: identity pool, memberships, record codec and reconciliation."""
