import os

# Bind to the port provided via the PORT environment variable, defaulting to
# 5000.
bind = f"0.0.0.0:{os.getenv('PORT', '5000')}"

# Eventlet workers keep the Socket.IO connections that deliver invoice list
# invalidations open.
worker_class = "eventlet"

# Socket.IO broadcasts only reach clients connected to the same process, so
# run a single worker and disable the timeout for long-lived connections.
workers = 1
timeout = 0
