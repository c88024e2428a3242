from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, model_validator

from exmachina.errors import PluginConfigError


class Social(BaseModel):
    github: Optional[str] = None
    linkedin: Optional[str] = None


class SiteMetadata(BaseModel):
    title: str = ""
    author: str = ""
    description: str = ""
    siteUrl: str = ""
    social: Social = Field(default_factory=Social)


class PluginConfig(BaseModel):
    resolve: str
    options: Dict[str, Any] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def _accept_bare_name(cls, value):
        if isinstance(value, str):
            return {"resolve": value}
        return value


def normalize_plugins(entries) -> List[PluginConfig]:
    """Turn a mixed list of names and option records into PluginConfig objects."""
    plugins = []
    for entry in entries or []:
        if isinstance(entry, PluginConfig):
            plugins.append(entry)
        elif isinstance(entry, (str, dict)):
            plugins.append(PluginConfig.model_validate(entry))
        else:
            raise PluginConfigError(f"Unsupported plugin entry: {entry!r}")
    return plugins


class SiteConfig(BaseModel):
    siteMetadata: SiteMetadata = Field(default_factory=SiteMetadata)
    plugins: List[PluginConfig] = Field(default_factory=list)

    def find_plugins(self, name: str) -> List[PluginConfig]:
        return [plugin for plugin in self.plugins if plugin.resolve == name]

    def plugin_options(self, name: str) -> Optional[Dict[str, Any]]:
        """Options of the first plugin called `name`, or None when not configured."""
        found = self.find_plugins(name)
        return found[0].options if found else None

    def has_plugin(self, name: str) -> bool:
        return bool(self.find_plugins(name))

    def source_path(self, source_name: str) -> Optional[str]:
        for plugin in self.find_plugins("source-filesystem"):
            if plugin.options.get("name") == source_name:
                return plugin.options.get("path")
        return None

    def transformer_plugins(self) -> List[PluginConfig]:
        options = self.plugin_options("transformer-markdown")
        if options is None:
            return []
        return normalize_plugins(options.get("plugins", []))
