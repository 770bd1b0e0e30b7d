"""Strongly typed identifiers for portal domain entities.

Option, course and content IDs are opaque strings (uuid4 text for options
created here, whatever the owning system issued for courses and content).
"""

from typing import NewType

OptionId = NewType("OptionId", str)
CourseId = NewType("CourseId", str)
ContentId = NewType("ContentId", str)
UserId = NewType("UserId", str)
