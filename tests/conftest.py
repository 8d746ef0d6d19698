import os

# keep test runs off the file log handlers
os.environ.setdefault("ENVIRONMENT", "testing")
