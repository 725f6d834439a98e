"""Form and report tools."""

from __future__ import annotations

from typing import Any

from access_mcp_server.backend.base import ObjectKind
from access_mcp_server.plugins.base import (
    BackendPlugin,
    Handler,
    ToolDefinition,
    object_schema,
    string_property,
)
from access_mcp_server.protocol.binder import (
    optional_string,
    require_primitive,
    require_string,
    require_text,
)

_FORM_NAME = string_property("Name of the form.")
_REPORT_NAME = string_property("Name of the report.")
_CONTROL_NAME = string_property("Name of the control.")

_FORM_ONLY = object_schema({"form_name": _FORM_NAME}, ["form_name"])
_REPORT_ONLY = object_schema({"report_name": _REPORT_NAME}, ["report_name"])
_CONTROL_TARGET = {
    "form_name": string_property("Form holding the control."),
    "report_name": string_property("Report holding the control (instead of form_name)."),
    "control_name": _CONTROL_NAME,
}


def _control_owner(arguments: dict[str, Any]) -> tuple[ObjectKind, str]:
    report_name = optional_string(arguments, "report_name")
    if report_name is not None:
        return "report", report_name
    return "form", require_string(arguments, "form_name")


class FormsPlugin(BackendPlugin):
    """Lists, exports, imports and automates forms and reports."""

    @property
    def name(self) -> str:
        return "forms"

    def _definitions(self) -> list[ToolDefinition]:
        return [
            ToolDefinition(
                name="get_forms",
                description="Get list of all forms in the database",
                input_schema=object_schema(),
            ),
            ToolDefinition(
                name="get_reports",
                description="Get list of all reports in the database",
                input_schema=object_schema(),
            ),
            ToolDefinition(
                name="form_exists",
                description="Check if a form exists",
                input_schema=_FORM_ONLY,
            ),
            ToolDefinition(
                name="open_form",
                description="Open a form in Access",
                input_schema=_FORM_ONLY,
            ),
            ToolDefinition(
                name="close_form",
                description="Close a form in Access",
                input_schema=_FORM_ONLY,
            ),
            ToolDefinition(
                name="open_report",
                description="Open a report in Access",
                input_schema=_REPORT_ONLY,
            ),
            ToolDefinition(
                name="close_report",
                description="Close a report in Access",
                input_schema=_REPORT_ONLY,
            ),
            ToolDefinition(
                name="get_form_controls",
                description="Get list of controls in a form",
                input_schema=_FORM_ONLY,
            ),
            ToolDefinition(
                name="get_report_controls",
                description="Get list of controls in a report",
                input_schema=_REPORT_ONLY,
            ),
            ToolDefinition(
                name="get_control_properties",
                description="Get properties of a control",
                input_schema=object_schema(_CONTROL_TARGET, ["control_name"]),
            ),
            ToolDefinition(
                name="set_control_property",
                description="Set a property of a control",
                input_schema=object_schema(
                    {
                        **_CONTROL_TARGET,
                        "property_name": string_property("Name of the property."),
                        "value": {
                            "type": ["string", "number", "integer", "boolean", "null"],
                            "description": "New property value.",
                        },
                    },
                    ["control_name", "property_name", "value"],
                ),
            ),
            ToolDefinition(
                name="export_form_to_text",
                description="Export a form to text format",
                input_schema=_FORM_ONLY,
            ),
            ToolDefinition(
                name="import_form_from_text",
                description="Import a form from text format",
                input_schema=object_schema(
                    {
                        "form_data": string_property("Text definition of the form."),
                        "form_name": string_property(
                            "Name to store the form under (read from form_data if omitted)."
                        ),
                    },
                    ["form_data"],
                ),
            ),
            ToolDefinition(
                name="delete_form",
                description="Delete a form from the database",
                input_schema=_FORM_ONLY,
            ),
            ToolDefinition(
                name="export_report_to_text",
                description="Export a report to text format",
                input_schema=_REPORT_ONLY,
            ),
            ToolDefinition(
                name="import_report_from_text",
                description="Import a report from text format",
                input_schema=object_schema(
                    {
                        "report_data": string_property("Text definition of the report."),
                        "report_name": string_property(
                            "Name to store the report under (read from report_data if omitted)."
                        ),
                    },
                    ["report_data"],
                ),
            ),
            ToolDefinition(
                name="delete_report",
                description="Delete a report from the database",
                input_schema=_REPORT_ONLY,
            ),
        ]

    def _handlers(self) -> dict[str, Handler]:
        return {
            "get_forms": self._get_forms,
            "get_reports": self._get_reports,
            "form_exists": self._form_exists,
            "open_form": self._open_form,
            "close_form": self._close_form,
            "open_report": self._open_report,
            "close_report": self._close_report,
            "get_form_controls": self._get_form_controls,
            "get_report_controls": self._get_report_controls,
            "get_control_properties": self._get_control_properties,
            "set_control_property": self._set_control_property,
            "export_form_to_text": self._export_form_to_text,
            "import_form_from_text": self._import_form_from_text,
            "delete_form": self._delete_form,
            "export_report_to_text": self._export_report_to_text,
            "import_report_from_text": self._import_report_from_text,
            "delete_report": self._delete_report,
        }

    def _get_forms(self, arguments: dict[str, Any]) -> dict[str, Any]:
        return {"forms": self.backend.get_objects("form")}

    def _get_reports(self, arguments: dict[str, Any]) -> dict[str, Any]:
        return {"reports": self.backend.get_objects("report")}

    def _form_exists(self, arguments: dict[str, Any]) -> dict[str, Any]:
        form_name = require_string(arguments, "form_name")
        return {"exists": self.backend.object_exists("form", form_name)}

    def _open_form(self, arguments: dict[str, Any]) -> dict[str, Any]:
        form_name = require_string(arguments, "form_name")
        self.backend.open_object("form", form_name)
        return {"message": f"Opened form {form_name}"}

    def _close_form(self, arguments: dict[str, Any]) -> dict[str, Any]:
        form_name = require_string(arguments, "form_name")
        self.backend.close_object("form", form_name)
        return {"message": f"Closed form {form_name}"}

    def _open_report(self, arguments: dict[str, Any]) -> dict[str, Any]:
        report_name = require_string(arguments, "report_name")
        self.backend.open_object("report", report_name)
        return {"message": f"Opened report {report_name}"}

    def _close_report(self, arguments: dict[str, Any]) -> dict[str, Any]:
        report_name = require_string(arguments, "report_name")
        self.backend.close_object("report", report_name)
        return {"message": f"Closed report {report_name}"}

    def _get_form_controls(self, arguments: dict[str, Any]) -> dict[str, Any]:
        form_name = require_string(arguments, "form_name")
        return {"controls": self.backend.get_controls("form", form_name)}

    def _get_report_controls(self, arguments: dict[str, Any]) -> dict[str, Any]:
        report_name = require_string(arguments, "report_name")
        return {"controls": self.backend.get_controls("report", report_name)}

    def _get_control_properties(self, arguments: dict[str, Any]) -> dict[str, Any]:
        kind, owner = _control_owner(arguments)
        control_name = require_string(arguments, "control_name")
        properties = self.backend.get_control_properties(kind, owner, control_name)
        return {"properties": properties}

    def _set_control_property(self, arguments: dict[str, Any]) -> dict[str, Any]:
        kind, owner = _control_owner(arguments)
        control_name = require_string(arguments, "control_name")
        property_name = require_string(arguments, "property_name")
        value = require_primitive(arguments, "value")
        self.backend.set_control_property(kind, owner, control_name, property_name, value)
        return {"message": f"Updated property {property_name}"}

    def _export_form_to_text(self, arguments: dict[str, Any]) -> dict[str, Any]:
        form_name = require_string(arguments, "form_name")
        return {"form_data": self.backend.export_object("form", form_name)}

    def _import_form_from_text(self, arguments: dict[str, Any]) -> dict[str, Any]:
        form_data = require_text(arguments, "form_data")
        form_name = optional_string(arguments, "form_name")
        stored = self.backend.import_object("form", form_data, form_name)
        return {"message": "Form imported successfully", "form_name": stored}

    def _delete_form(self, arguments: dict[str, Any]) -> dict[str, Any]:
        form_name = require_string(arguments, "form_name")
        self.backend.delete_object("form", form_name)
        return {"message": f"Deleted form {form_name}"}

    def _export_report_to_text(self, arguments: dict[str, Any]) -> dict[str, Any]:
        report_name = require_string(arguments, "report_name")
        return {"report_data": self.backend.export_object("report", report_name)}

    def _import_report_from_text(self, arguments: dict[str, Any]) -> dict[str, Any]:
        report_data = require_text(arguments, "report_data")
        report_name = optional_string(arguments, "report_name")
        stored = self.backend.import_object("report", report_data, report_name)
        return {"message": "Report imported successfully", "report_name": stored}

    def _delete_report(self, arguments: dict[str, Any]) -> dict[str, Any]:
        report_name = require_string(arguments, "report_name")
        self.backend.delete_object("report", report_name)
        return {"message": f"Deleted report {report_name}"}
