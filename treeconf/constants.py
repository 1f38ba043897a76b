"""Constants for the configuration framework."""

# Separator for dotted element paths
PATH_SEPARATOR = "."

# Log component names
COMPONENT_CONFIGURATION = "configuration"
COMPONENT_READER = "reader"
COMPONENT_CONFIGURABLE = "configurable"

# Environment variable prefix for framework settings
SETTINGS_ENV_PREFIX = "TREECONF_"
