# src/groqai/observability/names.py

"""Standard metric names for groqai observability.

Use these constants instead of hardcoded strings for consistency
across the codebase.

Note: All duration metrics are in milliseconds by convention.
"""

# ============================================================================
# HTTP exchange metrics
# ============================================================================

# Duration (one logical request, including retries and waits)
HTTP_REQUEST_DURATION = "groq_http_request_duration"

# Counters
HTTP_REQUESTS_TOTAL = "groq_http_requests_total"
HTTP_ERRORS_TOTAL = "groq_http_errors_total"
HTTP_RETRIES_TOTAL = "groq_http_retries_total"


# ============================================================================
# Rate limit metrics
# ============================================================================

# Duration (local wait imposed before dispatch)
RATE_LIMIT_ADMISSION_DELAY = "groq_rate_limit_admission_delay"


# ============================================================================
# Streaming metrics
# ============================================================================

# Counters
STREAM_RECORDS_TOTAL = "groq_stream_records_total"
STREAM_DECODE_ERRORS_TOTAL = "groq_stream_decode_errors_total"


# ============================================================================
# Token usage (chat completions)
# ============================================================================

# Counters (monotonic over time for cost/rate tracking)
LLM_TOKENS_PROMPT = "groq_tokens_prompt"
LLM_TOKENS_COMPLETION = "groq_tokens_completion"
LLM_TOKENS_TOTAL = "groq_tokens_total"
