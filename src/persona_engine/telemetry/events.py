"""Semantic event constants for structured logging.

All log events should use these constants rather than magic strings to ensure
consistency and enable reliable querying and analysis.
"""

# Turn lifecycle events
TURN_STARTED = "turn_started"
TURN_COMPLETED = "turn_completed"
TURN_FAILED = "turn_failed"
STATE_TRANSITION = "state_transition"
GRAPH_INTEGRITY_ERROR = "graph_integrity_error"

# Model invocation events
MODEL_CALL_STARTED = "model_call_started"
MODEL_CALL_COMPLETED = "model_call_completed"
MODEL_CALL_ERROR = "model_call_error"
RESPONSE_PARSE_FALLBACK = "response_parse_fallback"
RETRY_SCHEDULED = "retry_scheduled"
RETRIES_EXHAUSTED = "retries_exhausted"

# Model backend events
MODEL_INIT_STARTED = "model_init_started"
MODEL_INIT_COMPLETED = "model_init_completed"
MODEL_PULL_STARTED = "model_pull_started"
MODEL_DISPOSED = "model_disposed"
STREAM_LINE_SKIPPED = "stream_line_skipped"

# Memory events
MEMORY_RETRIEVED = "memory_retrieved"
MEMORY_EXTRACTED = "memory_extracted"
IMPORTANCE_UPDATED = "importance_updated"

# Quest events
QUEST_GENERATED = "quest_generated"
QUEST_GENERATION_FAILED = "quest_generation_failed"

# Persona store events
PERSONA_MIGRATED = "persona_migrated"
