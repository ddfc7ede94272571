"""
Shared Kernel

Value objects, the domain event base class, the unit of work and the
message bus used by the studio, booking and payment apps.
"""
