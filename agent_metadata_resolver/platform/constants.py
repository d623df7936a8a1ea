"""Service-wide constants."""

SERVICE_NAME = "agent-metadata-resolver"
SERVICE_VERSION = "0.1.0"
USER_AGENT = f"{SERVICE_NAME}/client.{SERVICE_VERSION}"
