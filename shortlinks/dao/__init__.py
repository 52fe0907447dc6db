from shortlinks.dao.base import ShortURLBaseDAO
from shortlinks.dao.exceptions import (
    DAOError,
    ShortURLNotFoundError,
    ShortURLAlreadyExistsError,
    DataStoreError,
    CacheUnavailableError,
)


__all__ = [
    'ShortURLBaseDAO',
    'DAOError',
    'ShortURLNotFoundError',
    'ShortURLAlreadyExistsError',
    'DataStoreError',
    'CacheUnavailableError',
]
