"""
Shared Kernel

Base classes and utilities shared by the members, classes and bookings apps:
domain events, value objects, the unit of work and the message bus.
"""
