from abc import ABC, abstractmethod

from contact_api.schemas.contact import ContactSubmission, StoredContact


class AbstractContactGateway(ABC):
    """Interface for stores that accept validated contact submissions.

    ``durable`` tells callers whether a successful ``save`` means the
    submission was actually written somewhere that survives a restart.
    """

    name: str = "abstract"
    durable: bool = False

    @abstractmethod
    async def save(self, submission: ContactSubmission) -> StoredContact | None:
        """Persist a submission as a single atomic insert.

        Args:
            submission: Fully validated submission.

        Returns:
            StoredContact: The stored row, or None when nothing was stored.

        Raises:
            PersistenceAppError: If the backend is unreachable or rejects the write.
        """
        ...

    @abstractmethod
    async def fetch(self, record_id: str | int) -> StoredContact | None:
        """Read back a stored submission by its row id.

        Returns:
            StoredContact: The row, or None when it does not exist.

        Raises:
            PersistenceAppError: If the backend cannot be queried.
        """
        ...
