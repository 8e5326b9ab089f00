"""Bookings app package.

This app encapsulates the booking engine: the booking model and its
lifecycle (pending, confirmed, cancelled), the free first session, card and
cash payment branching, the abuse guard evaluated before a seat is taken and
the periodic sweep that reclaims pending bookings nobody paid for. Seats are
taken and given back exclusively through ``apps.classes.ledger``.
"""
