"""Studios app package.

This app holds the studio catalog: studios with their timezone, the
services they sell, weekly opening hours and one-off blocked periods.
The availability store built on top of these models answers "is the
studio open for this interval" for the booking engine.
"""
