"""Pure domain layer: values, DTOs, constraint rules, clock and cancellation."""
