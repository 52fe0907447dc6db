# Delete URL lambda events / error codes
MISSING_ID = 'MISSING_ID'
INVALID_ID = 'INVALID_ID'
SHORT_URL_NOT_FOUND = 'SHORT_URL_NOT_FOUND'
DELETE_FAILED = 'DELETE_FAILED'
DELETE_SUCCESS = 'DELETE_SUCCESS'
