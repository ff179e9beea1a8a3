"""Bookings app package.

This app encapsulates the rental booking domain: the availability and
pricing calculators, the booking lifecycle, the atomic booking commit that
keeps each product's booked-days index in step with its bookings, and cart
checkout.
"""
