"""Plugin lifecycle errors: one class per failure reason surfaced to the caller."""

from __future__ import annotations


class DextError(Exception):
    """Base error for plugin lifecycle operations."""

    code = "ERR_DEXT"
    template = "{plugin}: operation failed"

    def __init__(self, plugin: str = "", message: str = ""):
        self.plugin = plugin
        super().__init__(message or self.template.format(plugin=plugin))

    @property
    def message(self) -> str:
        return str(self)


class ModuleEnabled(DextError):
    code = "ERR_MODULE_ENABLED"
    template = "plugin {plugin} is already enabled"


class ModuleNotFound(DextError):
    code = "ERR_MODULE_NOT_FOUND"
    template = "plugin {plugin} was not found in the registry"


class ModuleDownloadError(DextError):
    code = "ERR_MODULE_DOWNLOAD_ERROR"
    template = "plugin {plugin} could not be downloaded and installed"


class ModuleDisabled(DextError):
    code = "ERR_MODULE_DISABLED"
    template = "plugin {plugin} is not enabled"


class ModuleRemoveFailed(DextError):
    code = "ERR_MODULE_REMOVE_FAILED"
    template = "plugin {plugin} could not be removed"


class ThemeAlreadyActive(DextError):
    code = "ERR_THEME_ALREADY_ACTIVE"
    template = "theme {plugin} is already active"


class ModuleLinkFailed(DextError):
    code = "ERR_MODULE_LINK_FAILED"
    template = "plugin {plugin} could not be linked"


class InvalidPluginName(DextError):
    code = "ERR_INVALID_PLUGIN_NAME"
    template = "plugin name {plugin!r} does not fit under the plugins directory"


class RegistryError(RuntimeError):
    """Registry lookup or download failed (transport, HTTP or archive error)."""
