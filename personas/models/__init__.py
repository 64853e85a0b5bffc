"""Data models for person records, forms and errors."""
