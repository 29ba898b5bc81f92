"""
System policy pack loader (``authz_config.loader``).

Responsibility
--------------
Loads the YAML policy pack and parses it into ``authz_config.schema``
dataclasses.  This is internal tooling: the single public entry point is
``authz_config.get_system_policy_pack()``.

Architecture position
---------------------
**Config layer**.  Depends on PyYAML and on the kernel's condition codec
so that YAML conditions use exactly the same camelCase shape as stored
policy rows.

Invariants enforced
-------------------
* No silent defaults for required fields: missing keys raise ``KeyError``.
* ``compute_checksum`` produces a deterministic SHA-256 hash of the
  canonical JSON form of the parsed YAML.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Missing required keys  -> ``KeyError`` propagates.
* Malformed conditions  -> ``InvalidPolicyConditionError`` propagates.
* Unknown effect  -> ``ValueError``.
"""

from __future__ import annotations

import hashlib
import json
from pathlib import Path
from typing import Any

import yaml

from authz_config.schema import SystemPolicyPack, SystemPolicyTemplate
from authz_kernel.domain.condition_codec import (
    decode_action_condition,
    decode_environment_condition,
    decode_resource_condition,
    decode_subject_condition,
)
from authz_kernel.domain.policy import PolicyEffect


def load_yaml_file(path: Path) -> dict[str, Any]:
    """Load a single YAML file and return its contents as a dict."""
    with open(path) as f:
        return yaml.safe_load(f) or {}


def compute_checksum(data: dict[str, Any]) -> str:
    """SHA-256 checksum of the canonical JSON serialization of ``data``."""
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()


def parse_template(data: dict[str, Any]) -> SystemPolicyTemplate:
    """Parse one ``policies`` entry.

    Raises:
        KeyError: if ``key``, ``name``, ``subject``, ``resource``,
            ``action``, ``effect`` or ``priority`` is missing.
    """
    return SystemPolicyTemplate(
        key=data["key"],
        name=data["name"],
        description=data.get("description"),
        subject=decode_subject_condition(data["subject"]),
        resource=decode_resource_condition(data["resource"]),
        action=decode_action_condition(data["action"]),
        environment=decode_environment_condition(data.get("environment")),
        effect=PolicyEffect(data["effect"]),
        priority=data["priority"],
        is_active=data.get("is_active", True),
    )


def parse_pack(data: dict[str, Any]) -> SystemPolicyPack:
    return SystemPolicyPack(
        pack_id=data["pack_id"],
        version=int(data["version"]),
        templates=tuple(parse_template(p) for p in data.get("policies", [])),
        checksum=compute_checksum(data),
    )


def load_system_policy_pack(path: Path) -> SystemPolicyPack:
    """Load and parse a pack file (no validation)."""
    return parse_pack(load_yaml_file(path))
