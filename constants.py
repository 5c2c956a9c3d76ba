"""Constants for the IPMI power HTTP gateway."""

# ipmitool invocation
IPMITOOL_BINARY = "ipmitool"
IPMI_INTERFACE = "lanplus"
IPMI_PASSWORD_ENV = "IPMI_PASSWORD"

# Default configuration paths
DEFAULT_CONFIG_FILE = "/etc/ipmi-power-http/config.yml"
DEFAULT_CONFIG_EXAMPLE_FILE = "ipmi-power-http.yaml.example"

# HTTP listener
DEFAULT_LISTEN_HOST = "0.0.0.0"

# Timeouts (seconds)
IPMI_COMMAND_TIMEOUT = 30.0

# Control actions accepted in POST bodies
CONTROL_ACTIONS = ("on", "off", "reset", "cycle")

# HTTP response bodies
HTTP_OK_BODY = "ok"
HTTP_INVALID_TOKEN = "Invalid token"
HTTP_INVALID_ACTION = "Invalid action"
HTTP_ENDPOINT_NOT_FOUND = "Endpoint '{}' not found"
