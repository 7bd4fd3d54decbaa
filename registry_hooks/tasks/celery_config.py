"""Celery configuration for the webhook dispatch queue."""

from kombu import Exchange, Queue

# ==============================================================================
# BROKER & BACKEND CONFIGURATION
# ==============================================================================

# Connection settings
broker_connection_retry_on_startup = True
broker_connection_retry = True
broker_connection_max_retries = 10

# Connection pooling for better performance
broker_pool_limit = 10
broker_heartbeat = 30  # Seconds between heartbeats to detect connection issues

result_expires = 3600  # Results expire after 1 hour

# ==============================================================================
# TASK EXECUTION SETTINGS
# ==============================================================================

# Acknowledgment strategy
task_acks_late = True  # ACK after the fan-out finished, not on start
task_reject_on_worker_lost = True  # Requeue if worker dies unexpectedly
worker_prefetch_multiplier = 1  # One event per worker process at a time

# Task tracking
task_track_started = True
task_send_sent_event = True

# Serialization
task_serializer = "json"
accept_content = ["json"]  # Only accept JSON, prevent pickle attacks
result_serializer = "json"
timezone = "UTC"
enable_utc = True

# A dispatch waits for every webhook, each capped at 60s by the HTTP client
task_soft_time_limit = 90
task_time_limit = 120

# ==============================================================================
# QUEUE DEFINITIONS
# ==============================================================================

default_exchange = Exchange("default", type="direct", durable=True)
webhook_exchange = Exchange("webhooks", type="direct", durable=True)

task_queues = (
    # Default queue for general tasks
    Queue(
        "default",
        exchange=default_exchange,
        routing_key="default",
        durable=True,
    ),
    # Dedicated queue for webhook fan-out
    Queue(
        "webhook_queue",
        exchange=webhook_exchange,
        routing_key="webhook.dispatch",
        queue_arguments={
            "x-message-ttl": 3600000,  # Drop events nobody picked up within an hour
        },
        durable=True,
    ),
)

task_default_queue = "default"
task_default_exchange = "default"
task_default_routing_key = "default"

# ==============================================================================
# TASK ROUTING
# ==============================================================================

task_routes = {
    "dispatch_push_event": {
        "queue": "webhook_queue",
        "routing_key": "webhook.dispatch",
    },
}

# ==============================================================================
# WORKER CONFIGURATION
# ==============================================================================

# Fan-out is I/O bound; each process runs its own thread per webhook
worker_concurrency = 4
worker_max_tasks_per_child = 1000

worker_send_task_events = True
worker_log_format = "[%(asctime)s: %(levelname)s/%(processName)s] %(message)s"
worker_task_log_format = "[%(asctime)s: %(levelname)s/%(processName)s][%(task_name)s(%(task_id)s)] %(message)s"

# Ensure messages are persisted to disk
task_default_delivery_mode = 2  # 2 = persistent, 1 = transient
