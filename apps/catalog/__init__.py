"""Rental catalog: dresses and jewelry with their booked-days index."""
