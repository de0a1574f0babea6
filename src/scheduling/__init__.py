"""
Appointment availability engine.

Pure functions of a ``ServiceAvailabilityProfile``, a date and a duration.
Import from the submodules directly.
"""
