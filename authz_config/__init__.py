"""
authz_config -- single public entrypoint for the system policy pack.

Responsibility:
    Provides the ONLY way to obtain the system policies through
    ``get_system_policy_pack()``.  No other component reads the YAML pack
    directly.

Architecture position:
    Configuration -- YAML-authored policy templates, load-time validation.
    Sits above ``authz_kernel`` and below ``authz_services``.  The kernel
    and the engines MUST NEVER import from ``authz_config``.

Invariants enforced:
    - Single entrypoint: all system policy definitions flow through
      ``get_system_policy_pack()``.
    - Load-time validation: a pack with validation errors is never returned.
    - Deterministic checksum: the same YAML always yields the same checksum.

Failure modes:
    - ``FileNotFoundError`` -- pack file missing.
    - ``ValueError`` -- validation failures (all errors listed).
    - ``InvalidPolicyConditionError`` -- malformed condition payloads.

Audit relevance:
    Every successful call emits an ``AUTHZ_CONFIG_TRACE`` log record with
    pack id, version, checksum and policy count, tying seeded policies back
    to the exact pack that defined them.
"""

from __future__ import annotations

import logging
from pathlib import Path

from authz_config.loader import load_system_policy_pack
from authz_config.schema import SystemPolicyPack, SystemPolicyTemplate
from authz_config.validator import validate_system_policy_pack

_logger = logging.getLogger("authz.config")

_DEFAULT_PACK_PATH = Path(__file__).parent / "packs" / "system_policies.yaml"


def get_system_policy_pack(path: Path | None = None) -> SystemPolicyPack:
    """The ONLY public configuration entrypoint.

    Args:
        path: Override path to a pack file.  Defaults to
            ``authz_config/packs/system_policies.yaml``.

    Raises:
        FileNotFoundError: If the pack file does not exist.
        ValueError: If pack validation fails.
    """
    pack_path = path or _DEFAULT_PACK_PATH
    pack = load_system_policy_pack(pack_path)

    validation = validate_system_policy_pack(pack)
    if not validation.is_valid:
        raise ValueError(
            "System policy pack validation failed:\n"
            + "\n".join(f"  - {e}" for e in validation.errors)
        )
    for warning in validation.warnings:
        _logger.warning("system_policy_pack_warning", extra={"detail": warning})

    _logger.info(
        "AUTHZ_CONFIG_TRACE",
        extra={
            "trace_type": "AUTHZ_CONFIG_TRACE",
            "pack_id": pack.pack_id,
            "pack_version": pack.version,
            "checksum": pack.checksum,
            "policy_count": len(pack.templates),
            "active_policy_count": len(pack.active_templates),
            "source": str(pack_path),
        },
    )
    return pack


__all__ = ["get_system_policy_pack", "SystemPolicyPack", "SystemPolicyTemplate"]
