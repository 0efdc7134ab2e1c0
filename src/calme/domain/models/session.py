"""
Conversation Session Domain Model

Mutable runtime state of one conversation: where the user is in the
active graph, the flat variable map, and which activities were tried.

ARCHITECTURE: A session is owned by exactly one dialogue engine and
is only mutated through the engine's public operations.

PRIVACY: Variables may hold names and locations. Snapshots should
be stored encrypted by the host.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from calme.domain.enums.categories import GraphId


@dataclass
class Session:
    """
    Conversation session state.

    Attributes:
        current_node_id: Node the user is currently at
        active_graph_id: Graph being traversed
        variables: Flat map used for {var} substitution
        attempted_activities: Activities the user has already tried
        pending_return_node: Where to resume after a running activity
        pending_activity: Name of the running activity
        id: Unique session identifier
        created_at: Session start time
        updated_at: Last mutation time
    """

    current_node_id: str
    active_graph_id: GraphId = GraphId.MAIN
    variables: dict[str, str] = field(default_factory=dict)
    attempted_activities: set[str] = field(default_factory=set)
    pending_return_node: Optional[str] = None
    pending_activity: Optional[str] = None
    id: UUID = field(default_factory=uuid4)
    created_at: datetime = field(default_factory=datetime.utcnow)
    updated_at: datetime = field(default_factory=datetime.utcnow)

    @property
    def has_pending_activity(self) -> bool:
        """Whether the session is parked on a running activity."""
        return self.pending_return_node is not None

    def touch(self) -> None:
        """Record a mutation."""
        self.updated_at = datetime.utcnow()

    def clear_pending_activity(self) -> None:
        """Forget any parked activity."""
        self.pending_return_node = None
        self.pending_activity = None

    def to_dict(self) -> dict:
        """Serialize session to dictionary."""
        return {
            "id": str(self.id),
            "current_node_id": self.current_node_id,
            "active_graph_id": self.active_graph_id.value,
            "variables": dict(self.variables),
            "attempted_activities": sorted(self.attempted_activities),
            "pending_return_node": self.pending_return_node,
            "pending_activity": self.pending_activity,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Session":
        """Restore a session from a snapshot."""
        now = datetime.utcnow()
        return cls(
            id=UUID(data["id"]) if "id" in data else uuid4(),
            current_node_id=data["current_node_id"],
            active_graph_id=GraphId(data.get("active_graph_id", GraphId.MAIN.value)),
            variables={str(k): str(v) for k, v in data.get("variables", {}).items()},
            attempted_activities=set(data.get("attempted_activities", [])),
            pending_return_node=data.get("pending_return_node"),
            pending_activity=data.get("pending_activity"),
            created_at=datetime.fromisoformat(data["created_at"]) if "created_at" in data else now,
            updated_at=datetime.fromisoformat(data["updated_at"]) if "updated_at" in data else now,
        )
