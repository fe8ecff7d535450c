"""
CRC — domain/repositories.py

Name
- Domain Repository Interfaces (Protocols)

Responsibilities
- Define persistence contracts for the domain layer (ports).
- Keep the application independent from infrastructure (PostgreSQL, in-memory).
- Enable dependency inversion and straightforward unit testing.

Collaborators
- domain.entities: Property, UserEntity
- infrastructure.repositories: postgres / in_memory implementations
- infrastructure.db.transaction: concrete Transaction handles

Constraints
- Pure interfaces only: no side effects, no infrastructure imports, no SQL.
- Implementations MUST match method signatures exactly.

Notes
- We use typing.Protocol for structural subtyping ("duck typing").
- Failures are raised as crosscutting.exceptions.BHMSError subclasses:
  NotFoundError when an id/email does not exist, TranslationError when a row
  cannot be mapped, DatabaseError for everything else.
"""

from typing import List, Protocol
from uuid import UUID

from .entities import Property, UserEntity


class Transaction(Protocol):
    """
    R: Handle of an active transaction issued by the transaction coordinator.

    Stores never commit/rollback on their own; the coordinator owns that.
    """

    def commit(self) -> None: ...

    def rollback(self) -> None: ...


class PropertyStorer(Protocol):
    """R: Persistence capability for Property entities."""

    def create(self, prop: Property) -> None:
        """R: Insert a fully formed property (caller supplies id + timestamps)."""
        ...

    def update(self, prop: Property) -> None:
        """R: Full update of mutable fields keyed by id."""
        ...

    def delete(self, prop: Property) -> None:
        """R: Remove a property by id."""
        ...

    def query_by_id(self, property_id: UUID) -> Property:
        """R: Fetch one property (PropertyNotFoundError if missing)."""
        ...

    def query_by_manager_id(self, manager_id: UUID) -> List[Property]:
        """R: Every property of a manager (empty list if none)."""
        ...

    def execute_under_transaction(self, tx: Transaction) -> "PropertyStorer":
        """R: New store bound to tx; the receiver is left untouched."""
        ...


class UserStorer(Protocol):
    """R: Persistence capability for UserEntity records."""

    def create(self, user: UserEntity) -> None:
        """R: Insert a user (UniqueEmailError on duplicate email)."""
        ...

    def update(self, user: UserEntity) -> None:
        """R: Update mutable fields keyed by id."""
        ...

    def delete(self, user: UserEntity) -> None:
        """R: Remove a user by id."""
        ...

    def query_by_id(self, user_id: UUID) -> UserEntity:
        """R: Fetch one user (UserNotFoundError if missing)."""
        ...

    def query_by_ids(self, user_ids: List[UUID]) -> List[UserEntity]:
        """R: Fetch many users; missing ids are omitted, [] in -> [] out."""
        ...

    def query_by_email(self, email: str) -> UserEntity:
        """R: Fetch one user by normalized email (UserNotFoundError if missing)."""
        ...
