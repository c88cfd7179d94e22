"""
Built-in configuration sections of the Corvid platform.
"""

from corvid.config.schema import ConfigField

PENDING_STATUSES = [
    "NONE",
    "AUTOMATIC_IN_PROGRESS",
    "AUTOMATIC_READY",
    "AUTOMATIC_FAILURE",
    "MANUAL_IN_PROGRESS",
]

LOG_LEVELS = ["TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"]

UPDATECENTER = {
    "activate": ConfigField(bool, True, "Whether the update center may be queried"),
    "url": ConfigField(
        str,
        "https://update.corvid.dev/catalog.json",
        "URL of the plugin catalog",
        min=1,
    ),
    "timeout": ConfigField(
        float, 30.0, "HTTP timeout in seconds", min=1.0, max=300.0
    ),
}

PLUGINS = {
    "home": ConfigField(str, "extensions/plugins", "Installed plugins directory", min=1),
    "downloads": ConfigField(
        str, "extensions/downloads", "Plugins downloaded, installed on next restart", min=1
    ),
    "uninstalled": ConfigField(
        str,
        "extensions/uninstalled",
        "Plugins staged for removal on next restart",
        min=1,
    ),
}

DATABASE = {
    "url": ConfigField(
        str, "", "PostgreSQL URI. Empty starts an embedded server (development only)"
    ),
}

LOG = {
    "level": ConfigField(str, "INFO", "Log level", choices=LOG_LEVELS),
    "dir": ConfigField(str, "", "Log directory. Empty logs to the console only"),
}

EDITION = {
    "current_edition_key": ConfigField(str, "", "Edition currently installed"),
    "pending_edition_key": ConfigField(str, "", "Edition being installed"),
    "pending_plugin_keys": ConfigField(list, [], "Plugins of the pending edition"),
    "pending_installation_status": ConfigField(
        str, "NONE", "Status of the pending installation", choices=PENDING_STATUSES
    ),
    "installation_errors": ConfigField(list, [], "Errors of the last installation"),
}

BUILTIN_SECTIONS: dict[str, dict[str, ConfigField]] = {
    "updatecenter": UPDATECENTER,
    "plugins": PLUGINS,
    "database": DATABASE,
    "log": LOG,
    "edition": EDITION,
}
