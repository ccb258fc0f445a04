# ----------------------------------------------------------------------------------
# Performance loggers per API area
# -----------------------------------------------------------------------------------
PERFORMANCE_API_PREFIXES = {
    # key = prefix to match in request.path
    # value = short name, logger is "{short_name}_performance"
    "/api/v1/swap/offers": "offers",
    "/api/v1/swap/requests": "requests",
    "/api/v1/swap/transactions": "transactions",
    "/api/v1/swap/profile": "profiles",
}

SLOW_REQUEST_THRESHOLD_SEC = 2
