"""Repository interfaces for data persistence."""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from limit_automation.domain.entities import (
    Application,
    Client,
    ClientDebtor,
    Debtor,
    Policy,
    Stakeholder,
)


class ApplicationRepository(ABC):
    """
    Abstract repository for Application persistence.

    Implementations may use PostgreSQL, in-memory storage, etc.
    """

    @abstractmethod
    async def save(self, application: Application) -> Application:
        """Persist a new application."""
        ...

    @abstractmethod
    async def update(self, application: Application) -> Application:
        """
        Write all mutable fields of an existing application.

        Raises:
            ApplicationNotFoundException: If the application does not exist
        """
        ...

    @abstractmethod
    async def get_by_id(self, application_uuid: UUID) -> Optional[Application]:
        ...

    @abstractmethod
    async def find_open(self, client_id: UUID, debtor_id: UUID) -> Optional[Application]:
        """
        Find an application for the pair that blocks a new one.

        Returns:
            An application in a non-closed status, None otherwise
        """
        ...

    @abstractmethod
    async def find_latest_approved(self, client_debtor_id: UUID) -> Optional[Application]:
        """
        Find the most recently approved application for a credit-limit record.

        Returns:
            The APPROVED application with the latest approval date, if any
        """
        ...


class ClientRepository(ABC):
    @abstractmethod
    async def get_by_id(self, client_id: UUID) -> Optional[Client]:
        ...


class DebtorRepository(ABC):
    @abstractmethod
    async def get_by_id(self, debtor_id: UUID) -> Optional[Debtor]:
        ...

    @abstractmethod
    async def find_by_identifier(
        self,
        registration_number: Optional[str] = None,
        abn: Optional[str] = None,
        acn: Optional[str] = None,
    ) -> Optional[Debtor]:
        """
        Look a debtor up by its first available business identifier.

        The registration number wins over the ABN, which wins over the ACN.
        """
        ...

    @abstractmethod
    async def save(self, debtor: Debtor) -> Debtor:
        """Insert or update a debtor."""
        ...


class ClientDebtorRepository(ABC):
    """
    Abstract store for active credit-limit records.

    Limit fields are only written through `update_active_limit`.
    """

    @abstractmethod
    async def get_by_id(self, client_debtor_id: UUID) -> Optional[ClientDebtor]:
        ...

    @abstractmethod
    async def get_or_create(self, client_id: UUID, debtor_id: UUID) -> ClientDebtor:
        """
        Return the record for the pair, linking an empty one if none exists.

        A linked record carries no limit and is inactive.
        """
        ...

    @abstractmethod
    async def update_active_limit(
        self,
        client_debtor_id: UUID,
        credit_limit: int,
        active_application_id: UUID,
        expiry_date: datetime,
        is_endorsed_limit: bool = False,
    ) -> None:
        """Make an approved limit the effective one for the pair."""
        ...

    @abstractmethod
    async def deactivate_limit(self, client_debtor_id: UUID, application_id: UUID) -> bool:
        """
        Take the limit out of force if `application_id` is the active one.

        Returns:
            True if the record was deactivated
        """
        ...

    @abstractmethod
    async def find_expiring(self, start: datetime, end: datetime) -> List[ClientDebtor]:
        """Active records whose expiry date falls inside [start, end]."""
        ...


class PolicyRepository(ABC):
    @abstractmethod
    async def find_active_policy(
        self,
        client_id: UUID,
        product_pattern: str,
        at: datetime,
    ) -> Optional[Policy]:
        """
        Find one policy in force at `at` whose product contains the pattern.

        Args:
            client_id: The policy holder
            product_pattern: Case-insensitive substring of the product name
            at: Moment the policy must cover (inception <= at < expiry)
        """
        ...


class StakeholderRepository(ABC):
    @abstractmethod
    async def upsert(self, stakeholder: Stakeholder) -> Stakeholder:
        """
        Insert the stakeholder or update the one sharing its natural key.

        Returns:
            The stored stakeholder (keeps the existing id on update)
        """
        ...

    @abstractmethod
    async def get_by_debtor(self, debtor_id: UUID) -> List[Stakeholder]:
        ...


class SequenceRepository(ABC):
    @abstractmethod
    async def next_value(self, name: str) -> int:
        """Atomically increment and return the named organization counter."""
        ...
