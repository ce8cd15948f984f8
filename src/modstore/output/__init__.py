"""Output layer: rich rendering and JSON formatting of ServiceResult."""
