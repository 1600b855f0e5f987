from config.loader import get_config_loader

# Get the config loader instance
config = get_config_loader()

# Defaults file (JSON object with keys mirroring the CLI flags)
CONFIG_DEFAULTS_PATH = config.get("OAUTH2_CLI_CONFIG", "/etc/oauth2-cli.json")

# Listener defaults
DEFAULT_INTERFACE = "127.0.0.1"
DEFAULT_PORT = 8081
DEFAULT_CALLBACK = "/oauth/callback"

# Query parameter the provider puts the authorization code in
DEFAULT_CODE_PARAM = "code"

# Client credential placement for the token request: "params" or "header"
DEFAULT_AUTH_STYLE = "params"

# Timeout for the token endpoint request (connect + read)
HTTP_TIMEOUT = config.get("OAUTH2_CLI_HTTP_TIMEOUT", 30.0)

# Prefix for environment overrides of config keys (e.g. OAUTH2_CLI_CLIENT_ID)
ENV_PREFIX = "OAUTH2_CLI_"
