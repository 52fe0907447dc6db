# Shorten URL lambda events / error codes
INVALID_JSON_BODY = 'INVALID_JSON_BODY'
MISSING_URL = 'MISSING_URL'
INVALID_URL = 'INVALID_URL'
FORBIDDEN_URL = 'FORBIDDEN_URL'
SHORTEN_FAILED = 'SHORTEN_FAILED'
SHORTEN_SUCCESS = 'SHORTEN_SUCCESS'
