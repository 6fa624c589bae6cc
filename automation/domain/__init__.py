"""Domain layer: enums and exceptions for workflow rules. No infrastructure imports."""
