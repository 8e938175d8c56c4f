"""Shared type definitions for type checking.

Uses NewType for IDs to provide compile-time type safety - prevents mixing
different ID types (e.g., passing MagazineID where ArticleID expected).

Uses TypeAlias for types that are purely structural.
"""

from typing import Literal, NewType, TypeAlias

# ID types using NewType for type safety
ArticleID = NewType("ArticleID", str)
MagazineID = NewType("MagazineID", str)
SubscriberID = NewType("SubscriberID", str)

# Structural aliases
DeliveryMode: TypeAlias = Literal["at_least_once", "at_most_once"]
