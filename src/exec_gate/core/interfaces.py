"""exec-gate abstract interfaces and in-memory implementations.

This module defines the *structural* interfaces (``typing.Protocol``) for
the two seams of the gate -- policy persistence and command execution --
plus an in-memory policy store suitable for testing and embedding.

Every Protocol class is decorated with ``@runtime_checkable`` so that
``isinstance`` checks work at run-time in addition to static analysis.
"""
from __future__ import annotations

from typing import Protocol, runtime_checkable

from exec_gate.core.errors import PolicyLoadError
from exec_gate.core.types import CommandRequest, CommandResult, PolicyDocument

# ===================================================================
# Protocol (interface) definitions
# ===================================================================

@runtime_checkable
class PolicyStore(Protocol):
    """Durable backing store for the policy document.

    Stores own no business logic: they read and write whole documents.
    """

    @property
    def location(self) -> str:
        """Human-readable location of the document (used in log lines)."""
        ...

    def load(self) -> PolicyDocument:
        """Read the persisted document.

        Raises :class:`PolicyLoadError` if it is missing or malformed.
        """
        ...

    def save(self, document: PolicyDocument) -> None:
        """Persist *document*, replacing any previous version.

        Raises :class:`PolicySaveError` on I/O failure.
        """
        ...


@runtime_checkable
class CommandExecutor(Protocol):
    """Executes an approved shell command and captures its output.

    Implementations (local process, sandboxed, remote) MUST satisfy the
    :class:`CommandResult` invariants: a timed-out result carries
    ``exit_code == -1``, start failures are reported as results rather
    than raised, and caller cancellation (cancelling the awaiting task)
    propagates as :class:`asyncio.CancelledError` after cleanup.
    """

    @property
    def name(self) -> str:
        """Short name of the executor, e.g. ``"local"``."""
        ...

    async def run(self, request: CommandRequest) -> CommandResult:
        """Execute *request* and return its result."""
        ...


# ===================================================================
# In-memory implementations
# ===================================================================

class InMemoryPolicyStore:
    """In-memory policy store for testing and development.

    A fresh store behaves like a missing file: :meth:`load` raises
    :class:`PolicyLoadError` until a document has been saved.
    """

    def __init__(self, document: PolicyDocument | None = None) -> None:
        self._document = document.model_copy(deep=True) if document else None
        self.save_count = 0

    @property
    def location(self) -> str:
        return "<memory>"

    @property
    def document(self) -> PolicyDocument | None:
        """Return a copy of the stored document, or ``None``."""
        return self._document.model_copy(deep=True) if self._document else None

    def load(self) -> PolicyDocument:
        """Return a copy of the stored document."""
        if self._document is None:
            raise PolicyLoadError("No policy document stored")
        return self._document.model_copy(deep=True)

    def save(self, document: PolicyDocument) -> None:
        """Store a copy of *document*."""
        self._document = document.model_copy(deep=True)
        self.save_count += 1
