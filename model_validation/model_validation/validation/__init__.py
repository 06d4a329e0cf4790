"""Child enumeration, model state and the validation engine."""
