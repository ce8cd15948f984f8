"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, modstore.toml only contains
overrides. A fresh project needs no config file at all.

Example ``modstore.toml``::

    [storage]
    database = ".modstore/modstore.db"

    [modules.students.template]
    name = ""
    age = 0

    [modules.students.schema.name]
    required = true
    minLength = 2

    [[relations]]
    from = "students"
    to = "tasks"
    key_from = "id"
    key_to = "assignedTo"
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from modstore.domain.validation import FieldRule

# --- modstore.toml sections ---


class StorageConfig(BaseModel):
    """[storage] section."""

    model_config = {"frozen": True}

    database: str = ".modstore/modstore.db"
    autosave: bool = True


class PluginsConfig(BaseModel):
    """[plugins] section."""

    model_config = {"frozen": True}

    enabled: bool = True
    local_dir: str = ".modstore/plugins"


class ModuleConfig(BaseModel):
    """[modules.<name>] section."""

    model_config = {"frozen": True, "populate_by_name": True}

    template: dict[str, Any] = Field(default_factory=dict)
    rules: dict[str, FieldRule] = Field(default_factory=dict, alias="schema")


class RelationConfig(BaseModel):
    """One [[relations]] entry."""

    model_config = {"frozen": True, "populate_by_name": True}

    module_from: str = Field(alias="from")
    module_to: str = Field(alias="to")
    key_from: str
    key_to: str


class StoreConfig(BaseModel):
    """Root configuration composing all sections."""

    model_config = {"frozen": True}

    storage: StorageConfig = Field(default_factory=StorageConfig)
    plugins: PluginsConfig = Field(default_factory=PluginsConfig)
    modules: dict[str, ModuleConfig] = Field(default_factory=dict)
    relations: list[RelationConfig] = Field(default_factory=list)
