"""Transactional email for bookings, delivered by Celery with retries."""
