"""Abstract base class for ShortURL data access objects (DAOs).

This class establishes a consistent contract for all ShortURL DAO implementations,
regardless of the underlying storage mechanism (e.g., Redis, in-memory, PostgreSQL).

Responsibilities:
    - Provide an interface for inserting, retrieving and deactivating ShortURLModel objects.
    - Standardize error handling across multiple data store implementations.
    - Keep every write atomic at the single-record or bulk-predicate level.

Example:
    Typical usage with a datastore-specific implementation:

        >>> from shortlinks.models import ShortURLModel
        >>> from shortlinks.dao.redis import ShortURLRedisDAO

        >>> dao = ShortURLRedisDAO(...)
        >>> dao.insert(short_url)

        >>> retrieved = dao.get("a1b2c3d4")
        >>> print(retrieved.target)
        https://example.com/blog/article-123

        >>> dao.hit("a1b2c3d4")
        1
"""

from abc import ABC, abstractmethod
from datetime import datetime

from shortlinks.models import ShortURLModel


class ShortURLBaseDAO(ABC):
    """Interface for ShortURL data access objects (DAOs).

    Methods:
        insert(short_url: ShortURLModel, **kwargs) -> ShortURLBaseDAO:
            Insert a new ShortURLModel into the data store.
            Raises ShortURLAlreadyExistsError if the short code already exists.

        get(shortcode: str, active_only: bool = False, **kwargs) -> ShortURLModel:
            Retrieve a ShortURLModel by short code.
            Raises ShortURLNotFoundError if the entry does not exist.

        get_by_id(link_id: str, **kwargs) -> ShortURLModel:
            Retrieve a ShortURLModel by id.
            Raises ShortURLNotFoundError if the entry does not exist.

        exists(shortcode: str, **kwargs) -> bool:
            Check whether a short code was ever assigned (active or not).

        hit(shortcode: str, **kwargs) -> int:
            Atomically increment the click counter of an active record.
            Raises ShortURLNotFoundError if no active record matches.

        deactivate(link_id: str, **kwargs) -> ShortURLModel:
            Logically delete an active record.
            Raises ShortURLNotFoundError if no active record matches.

        expired(now: datetime | None = None, **kwargs) -> list[ShortURLModel]:
            List active records whose expiry has passed.

        deactivate_expired(now: datetime | None = None, **kwargs) -> int:
            Atomically deactivate all active, expired records.

    All methods raise DataStoreError on connection, timeout or write failure.

    Subclassing:
        Datastore-specific implementations (e.g., ShortURLRedisDAO or
        ShortURLMemoryDAO) must extend this class and implement all
        abstract methods.

    NOTE:
        - Records are never physically deleted. Uniqueness of short codes is
          checked against the full history, so expired or deleted codes are
          never reassigned.
    """

    @abstractmethod
    def insert(self, short_url: ShortURLModel, **kwargs) -> 'ShortURLBaseDAO':
        """Insert a new ShortURLModel into the data store.

        Args:
            short_url (ShortURLModel):
                The ShortURLModel instance to be inserted.

            **kwargs:
                Additional keyword arguments, used by data store.

        Returns:
            ShortURLBaseDAO: self (for method chaining)

        Raises:
            ShortURLAlreadyExistsError:
                If a ShortURLModel with the same short code already exists

            DataStoreError:
                If there is an error in the data store.
        """
        pass

    @abstractmethod
    def get(self, shortcode: str, active_only: bool = False, **kwargs) -> ShortURLModel:
        """Retrieve a ShortURLModel from the data store by its short code.

        Args:
            shortcode (str):
                The short code of the ShortURLModel to be retrieved.

            active_only (bool):
                If True, treat deactivated records as missing.

            **kwargs:
                Additional keyword arguments, used by data store.

        Returns:
            ShortURLModel: The ShortURLModel instance.

        Raises:
            ShortURLNotFoundError:
                If no (active) ShortURLModel with the given short code exists.

            DataStoreError:
                If there is an error in the data store.
        """
        pass

    @abstractmethod
    def get_by_id(self, link_id: str, **kwargs) -> ShortURLModel:
        """Retrieve a ShortURLModel from the data store by its id.

        Raises:
            ShortURLNotFoundError:
                If no ShortURLModel with the given id exists.

            DataStoreError:
                If there is an error in the data store.
        """
        pass

    @abstractmethod
    def exists(self, shortcode: str, **kwargs) -> bool:
        """Check whether a short code exists, regardless of its active state."""
        pass

    @abstractmethod
    def hit(self, shortcode: str, **kwargs) -> int:
        """Atomically increment the click counter of an active short URL.

        Returns:
            int: The click count after incrementing.

        Raises:
            ShortURLNotFoundError:
                If no active record with the given short code exists.

            DataStoreError:
                If there is an error in the data store.
        """
        pass

    @abstractmethod
    def deactivate(self, link_id: str, **kwargs) -> ShortURLModel:
        """Logically delete an active short URL by id.

        Returns:
            ShortURLModel: The record as it was before deactivation.

        Raises:
            ShortURLNotFoundError:
                If no active record with the given id exists.

            DataStoreError:
                If there is an error in the data store.
        """
        pass

    @abstractmethod
    def expired(self, now: datetime | None = None, **kwargs) -> list[ShortURLModel]:
        """List active records whose expiry lies before `now`."""
        pass

    @abstractmethod
    def deactivate_expired(self, now: datetime | None = None, **kwargs) -> int:
        """Deactivate all active records whose expiry lies before `now`.

        Deactivating an already inactive record is a no-op, so concurrent
        calls are safe.

        Returns:
            int: Number of records deactivated by this call.
        """
        pass
