"""Exceptions raised by the tree and user services; the API layer maps them to HTTP statuses."""


class TreeServiceError(Exception):
    """Base for expected, client-facing failures of tree operations."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class NodeNotFoundError(TreeServiceError):
    """Raised when a referenced node id does not exist."""

    def __init__(self, node_id: str, what: str = "Node") -> None:
        self.node_id = node_id
        super().__init__(f"{what} {node_id} not found")


class CycleDetectedError(TreeServiceError):
    """Raised when setting a parent would make a node its own ancestor."""

    def __init__(self, node_id: str, parent_id: str) -> None:
        self.node_id = node_id
        self.parent_id = parent_id
        super().__init__(
            f"Cycle detected: node {node_id} cannot be placed under {parent_id}"
        )


class InvalidRootError(TreeServiceError):
    """Raised when a tree is requested for a root id that does not exist."""

    def __init__(self, root_id: str) -> None:
        self.root_id = root_id
        super().__init__(f"Root node {root_id} not found")


class DanglingParentError(TreeServiceError):
    """Raised in strict mode when a stored parent chain references a missing node."""

    def __init__(self, node_id: str, missing_id: str) -> None:
        self.node_id = node_id
        self.missing_id = missing_id
        super().__init__(
            f"Ancestor chain of node {node_id} references missing node {missing_id}"
        )


class UsernameTakenError(Exception):
    """Raised when registering a username that already exists."""

    def __init__(self, username: str) -> None:
        self.username = username
        self.message = f"User '{username}' already exists"
        super().__init__(self.message)
