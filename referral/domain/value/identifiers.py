"""Strongly typed identifiers for referral engine entities.

Using NewType for strong typing prevents mixing up different entity IDs
and makes the code more self-documenting.
"""

from typing import NewType
from uuid import UUID

# User ids come from the identity provider and are opaque strings
UserId = NewType("UserId", str)

# Engine-owned identifiers
InviteId = NewType("InviteId", UUID)
EdgeId = NewType("EdgeId", UUID)
