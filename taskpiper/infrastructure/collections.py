"""Collection names and array fields (schema-in-code).

Document stores have no DDL. Use these constants so collection names stay
consistent across backends.
"""

COLLECTION_TASKS = "tasks"
COLLECTION_USERS = "users"

# Fields stored as arrays: equality filters on them mean "array contains".
ARRAY_FIELDS: frozenset[str] = frozenset({"pendingTasks"})
