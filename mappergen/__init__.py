"""Generator of field-by-field mappers between structurally similar Go structs."""

__version__ = "0.1.0"
