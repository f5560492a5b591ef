"""customer-service configuration.

This module only reads environment variables. Every other module imports the
constants it needs from here, so the service can run locally, in Docker or on
a VM without code changes.

All defaults are meant for development; override them in deployed
environments.
"""

from __future__ import annotations

import os

# --- Logging -----------------------------------------------------------------
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

# --- Store -------------------------------------------------------------------
# "mongo" for MongoDB, "memory" for a process-local store (tests, demos).
STORE_BACKEND: str = os.getenv("STORE_BACKEND", "mongo")

# Mongo connection string. Example: "mongodb://172.31.2.197:27017"
MONGO_URI: str = os.getenv("MONGO_URI", "mongodb://localhost:27017")

MONGO_DB: str = os.getenv("MONGO_DB", "customers_db")

MONGO_COLLECTION: str = os.getenv("MONGO_COLLECTION", "customers")

# Holds the sequence documents used to allocate integer customer ids.
MONGO_COUNTERS_COLLECTION: str = os.getenv("MONGO_COUNTERS_COLLECTION", "counters")

# --- Notifications -----------------------------------------------------------
# "kafka" publishes change events, "log" only writes them to the log.
NOTIFICATION_BACKEND: str = os.getenv("NOTIFICATION_BACKEND", "kafka")

# Kafka bootstrap servers (broker addresses). Example: "172.31.0.202:9092"
KAFKA_BOOTSTRAP_SERVERS: str = os.getenv("KAFKA_BOOTSTRAP_SERVERS", "localhost:9092")

# Prepended to every event topic, e.g. "prod." -> "prod.customer.created".
KAFKA_TOPIC_PREFIX: str = os.getenv("KAFKA_TOPIC_PREFIX", "")

# Upper bound on how long a request waits for broker acknowledgement.
KAFKA_FLUSH_TIMEOUT_SEC: float = float(os.getenv("KAFKA_FLUSH_TIMEOUT_SEC", "5"))
