"""Semantic type aliases for compile-time type safety.

NewType creates distinct types that mypy treats as incompatible,
preventing accidental misuse of semantically different string values.
"""

from typing import NewType

NodeID = NewType("NodeID", str)
"""Workflow node identifier, `<Kind>-<n>` for editor-created nodes (e.g., 'CreateRole-3')"""

EdgeID = NewType("EdgeID", str)
"""Workflow edge identifier (e.g., 'xy-edge__CreateRole-1source-1-CreateChannel-1target-1')"""

HandleID = NewType("HandleID", str)
"""Port identifier on a node (e.g., 'source-1', 'source-cond-abc', 'source-default')"""

SessionID = NewType("SessionID", str)
"""Session identifier in the local resource store"""

GuildID = NewType("GuildID", str)
"""Platform guild snowflake id"""

RoleID = NewType("RoleID", str)
"""Platform role snowflake id"""

ChannelID = NewType("ChannelID", str)
"""Platform channel snowflake id (categories are channels on the platform)"""

CategoryID = NewType("CategoryID", str)
"""Platform category snowflake id"""

MemberID = NewType("MemberID", str)
"""Platform guild member (user) snowflake id"""

type GameFlags = dict[str, str]
"""Session game-flag map; the only cross-node mutable state besides the graph"""
