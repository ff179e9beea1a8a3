"""Discount codes applied at cart time."""
