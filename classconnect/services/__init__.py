"""Domain services: one class per resource, constructed per request."""
