"""
Shared Kernel

Building blocks shared by every app of the storefront: domain events,
value objects, the unit of work and the message bus.
"""
