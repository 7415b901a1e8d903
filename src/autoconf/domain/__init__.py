"""Domain layer: model, ports, templating and the reconciliation core."""
