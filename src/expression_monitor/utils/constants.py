"""
Constants used throughout the expression monitor
"""

# Detection interval per compute backend (milliseconds between classifications)
WEBGL_TIME_INTERVAL = 1000
CPU_TIME_INTERVAL = 6000
UNKNOWN_DETECTION_INTERVAL = -1  # Backend not reported (durations stay in frames)

# Webhook delivery
WEBHOOK_SEND_TIME_INTERVAL = 15000  # Milliseconds between delivery ticks
WEBHOOK_TIMEOUT = 10  # Seconds
WEBHOOK_PATH = "/emotions"

# Worker process
WORKER_PROCESS_NAME = "ExpressionWorker"
WORKER_SHUTDOWN_TIMEOUT = 5.0  # Seconds before forced termination

# Camera reconnection
MAX_CAMERA_RECONNECT_ATTEMPTS = 2
CAMERA_RECONNECT_DELAY = 2.0  # Seconds between reconnection attempts

# Environment variables
ENV_CAMERA_URL = "CAMERA_URL"
ENV_WEBHOOK_URL = "EXPRESSION_WEBHOOK_URL"
ENV_WEBHOOK_TOKEN = "EXPRESSION_WEBHOOK_TOKEN"
