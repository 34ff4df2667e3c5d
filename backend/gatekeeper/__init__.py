"""PrepAI gatekeeper: RBAC permission registry, access decisions and route gating."""
