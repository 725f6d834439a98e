"""VBA module and macro tools."""

from __future__ import annotations

from typing import Any

from access_mcp_server.plugins.base import (
    BackendPlugin,
    Handler,
    ToolDefinition,
    object_schema,
    string_property,
)
from access_mcp_server.protocol.binder import (
    ArgumentError,
    optional_string,
    require_string,
    require_text,
)

_PROJECT_NAME = string_property("VBA project name (defaults to the database's project).")
_MODULE_NAME = string_property("Name of the module.")
_MACRO_NAME = string_property("Name of the macro.")
_MACRO_ONLY = object_schema({"macro_name": _MACRO_NAME}, ["macro_name"])


class VbaPlugin(BackendPlugin):
    """Reads and edits VBA code and manages macros."""

    @property
    def name(self) -> str:
        return "vba"

    def _definitions(self) -> list[ToolDefinition]:
        return [
            ToolDefinition(
                name="get_macros",
                description="Get list of all macros in the database",
                input_schema=object_schema(),
            ),
            ToolDefinition(
                name="get_modules",
                description="Get list of all modules in the database",
                input_schema=object_schema(),
            ),
            ToolDefinition(
                name="get_vba_projects",
                description="Get list of VBA projects",
                input_schema=object_schema(),
            ),
            ToolDefinition(
                name="get_vba_code",
                description="Get VBA code from a module",
                input_schema=object_schema(
                    {"project_name": _PROJECT_NAME, "module_name": _MODULE_NAME},
                    ["module_name"],
                ),
            ),
            ToolDefinition(
                name="set_vba_code",
                description="Set VBA code in a module",
                input_schema=object_schema(
                    {
                        "project_name": _PROJECT_NAME,
                        "module_name": _MODULE_NAME,
                        "code": string_property("Full source of the module."),
                    },
                    ["module_name", "code"],
                ),
            ),
            ToolDefinition(
                name="add_vba_procedure",
                description="Add a VBA procedure to a module",
                input_schema=object_schema(
                    {
                        "project_name": _PROJECT_NAME,
                        "module_name": _MODULE_NAME,
                        "procedure_name": string_property("Name of the procedure."),
                        "code": string_property(
                            "Procedure source, or its body to wrap in a Public Sub."
                        ),
                    },
                    ["module_name", "procedure_name", "code"],
                ),
            ),
            ToolDefinition(
                name="compile_vba",
                description="Compile VBA code",
                input_schema=object_schema(),
            ),
            ToolDefinition(
                name="export_macro_to_text",
                description="Export a macro to text format",
                input_schema=_MACRO_ONLY,
            ),
            ToolDefinition(
                name="import_macro_from_text",
                description="Import a macro from text format",
                input_schema=object_schema(
                    {
                        "macro_data": string_property("Text definition of the macro."),
                        "macro_name": string_property(
                            "Name to store the macro under (read from macro_data if omitted)."
                        ),
                    },
                    ["macro_data"],
                ),
            ),
            ToolDefinition(
                name="run_macro",
                description="Run a macro in Access",
                input_schema=_MACRO_ONLY,
            ),
            ToolDefinition(
                name="delete_macro",
                description="Delete a macro from the database",
                input_schema=_MACRO_ONLY,
            ),
        ]

    def _handlers(self) -> dict[str, Handler]:
        return {
            "get_macros": self._get_macros,
            "get_modules": self._get_modules,
            "get_vba_projects": self._get_vba_projects,
            "get_vba_code": self._get_vba_code,
            "set_vba_code": self._set_vba_code,
            "add_vba_procedure": self._add_vba_procedure,
            "compile_vba": self._compile_vba,
            "export_macro_to_text": self._export_macro_to_text,
            "import_macro_from_text": self._import_macro_from_text,
            "run_macro": self._run_macro,
            "delete_macro": self._delete_macro,
        }

    def _project_name(self, arguments: dict[str, Any]) -> str:
        project_name = optional_string(arguments, "project_name")
        if project_name is not None:
            return project_name
        projects = self.backend.get_vba_projects()
        if not projects:
            raise ArgumentError("project_name is required")
        return projects[0]["name"]

    def _get_macros(self, arguments: dict[str, Any]) -> dict[str, Any]:
        return {"macros": self.backend.get_objects("macro")}

    def _get_modules(self, arguments: dict[str, Any]) -> dict[str, Any]:
        return {"modules": self.backend.get_objects("module")}

    def _get_vba_projects(self, arguments: dict[str, Any]) -> dict[str, Any]:
        return {"projects": self.backend.get_vba_projects()}

    def _get_vba_code(self, arguments: dict[str, Any]) -> dict[str, Any]:
        module_name = require_string(arguments, "module_name")
        project_name = self._project_name(arguments)
        return {"code": self.backend.get_vba_code(project_name, module_name)}

    def _set_vba_code(self, arguments: dict[str, Any]) -> dict[str, Any]:
        module_name = require_string(arguments, "module_name")
        code = require_text(arguments, "code")
        project_name = self._project_name(arguments)
        self.backend.set_vba_code(project_name, module_name, code)
        return {"message": f"Updated VBA code in {module_name}"}

    def _add_vba_procedure(self, arguments: dict[str, Any]) -> dict[str, Any]:
        module_name = require_string(arguments, "module_name")
        procedure_name = require_string(arguments, "procedure_name")
        code = require_text(arguments, "code")
        project_name = self._project_name(arguments)
        self.backend.add_vba_procedure(project_name, module_name, procedure_name, code)
        return {"message": f"Added VBA procedure {procedure_name}"}

    def _compile_vba(self, arguments: dict[str, Any]) -> dict[str, Any]:
        self.backend.compile_vba()
        return {"message": "VBA compiled successfully"}

    def _export_macro_to_text(self, arguments: dict[str, Any]) -> dict[str, Any]:
        macro_name = require_string(arguments, "macro_name")
        return {"macro_data": self.backend.export_object("macro", macro_name)}

    def _import_macro_from_text(self, arguments: dict[str, Any]) -> dict[str, Any]:
        macro_data = require_text(arguments, "macro_data")
        macro_name = optional_string(arguments, "macro_name")
        stored = self.backend.import_object("macro", macro_data, macro_name)
        return {"message": "Macro imported successfully", "macro_name": stored}

    def _run_macro(self, arguments: dict[str, Any]) -> dict[str, Any]:
        macro_name = require_string(arguments, "macro_name")
        self.backend.run_macro(macro_name)
        return {"message": f"Ran macro {macro_name}"}

    def _delete_macro(self, arguments: dict[str, Any]) -> dict[str, Any]:
        macro_name = require_string(arguments, "macro_name")
        self.backend.delete_object("macro", macro_name)
        return {"message": f"Deleted macro {macro_name}"}
