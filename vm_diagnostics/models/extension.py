"""Data models for VM extension references.

An extension reference is the generic record that attaches a named,
versioned extension with opaque key/value parameters to a VM role.
``VirtualMachine`` is the minimal role model the set/get activities
operate on; ``DiagnosticsExtensionContext`` is what the get activity
reports for each diagnostics extension found on a role.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from lxml.etree import _Element


@dataclass(frozen=True, slots=True)
class ExtensionParameter:
    """A single key/value parameter of an extension reference."""

    key: str
    value: str

    def to_dict(self) -> dict[str, str]:
        return {"key": self.key, "value": self.value}


@dataclass(frozen=True, slots=True)
class ExtensionReference:
    """Generic extension reference attached to a VM role.

    Attributes:
        reference_name: Name of this reference on the role.
        publisher: Extension publisher.
        name: Extension name.
        version: Extension version.
        parameters: Ordered key/value parameters.
    """

    reference_name: str
    publisher: str
    name: str
    version: str
    parameters: tuple[ExtensionParameter, ...] = ()

    def get_parameter(self, key: str) -> ExtensionParameter | None:
        """Return the first parameter named *key*, or ``None``."""
        for parameter in self.parameters:
            if parameter.key == key:
                return parameter
        return None

    def to_dict(self) -> dict[str, Any]:
        """Serialise to the control-plane JSON shape."""
        return {
            "referenceName": self.reference_name,
            "publisher": self.publisher,
            "name": self.name,
            "version": self.version,
            "parameters": [p.to_dict() for p in self.parameters],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ExtensionReference:
        """Deserialise from the control-plane JSON shape.

        Missing fields default to empty strings / no parameters.

        Raises:
            TypeError: If ``parameters`` is not a list of dicts.
        """
        raw_parameters = data.get("parameters") or []
        if not isinstance(raw_parameters, list):
            msg = f"parameters must be a list, got {type(raw_parameters).__name__}"
            raise TypeError(msg)

        parameters = []
        for raw in raw_parameters:
            if not isinstance(raw, dict):
                msg = f"parameter must be a dict, got {type(raw).__name__}"
                raise TypeError(msg)
            parameters.append(
                ExtensionParameter(key=str(raw.get("key", "")), value=str(raw.get("value", "")))
            )

        return cls(
            reference_name=str(data.get("referenceName", "")),
            publisher=str(data.get("publisher", "")),
            name=str(data.get("name", "")),
            version=str(data.get("version", "")),
            parameters=tuple(parameters),
        )


@dataclass(frozen=True, slots=True)
class VirtualMachine:
    """Minimal VM role model carrying extension references.

    Attributes:
        role_name: Name of the VM role.
        provision_guest_agent: Whether the guest agent is provisioned;
            ``None`` when the setting is unknown.
        resource_extension_references: References attached to the role.
    """

    role_name: str
    provision_guest_agent: bool | None = None
    resource_extension_references: tuple[ExtensionReference, ...] = ()

    def with_references(self, references: tuple[ExtensionReference, ...]) -> VirtualMachine:
        """Return a copy of this role with *references* attached."""
        return replace(self, resource_extension_references=tuple(references))


@dataclass(frozen=True, slots=True)
class DiagnosticsExtensionContext:
    """Diagnostics extension settings read back from a VM role."""

    name: str
    publisher: str
    reference_name: str
    version: str
    enabled: bool = False
    storage_account_name: str = ""
    diagnostics_fragment: _Element | None = field(default=None, compare=False)
