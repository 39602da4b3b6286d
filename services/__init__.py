"""Reservation services."""
