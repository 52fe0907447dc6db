# Sweep expired lambda statuses
SUCCESS = 'success'
ERROR = 'error'
