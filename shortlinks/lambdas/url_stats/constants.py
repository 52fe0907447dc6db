# URL stats lambda events / error codes
MISSING_SHORTCODE = 'MISSING_SHORTCODE'
SHORT_URL_NOT_FOUND = 'SHORT_URL_NOT_FOUND'
STATS_FAILED = 'STATS_FAILED'
STATS_SUCCESS = 'STATS_SUCCESS'
