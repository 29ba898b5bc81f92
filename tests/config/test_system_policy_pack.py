"""
Tests for the system policy pack: YAML loading, validation and the single
configuration entrypoint.
"""

from pathlib import Path

import pytest
import yaml

from authz_config import get_system_policy_pack
from authz_config.loader import compute_checksum, load_system_policy_pack, parse_template
from authz_config.validator import validate_system_policy_pack
from authz_kernel.domain.contexts import PeriodStatus
from authz_kernel.domain.policy import PolicyEffect
from authz_kernel.exceptions import InvalidPolicyConditionError

EXPECTED_KEYS = {
    "platform_admin_full_access",
    "owner_full_access",
    "viewer_read_only",
    "locked_period_protection",
    "closed_period_protection",
    "future_period_protection",
    "soft_close_controller_access",
    "soft_close_restriction",
}


def _template(**overrides):
    data = {
        "key": "t",
        "name": "Template",
        "subject": {"roles": ["owner"]},
        "resource": {"type": "*"},
        "action": {"actions": ["*"]},
        "effect": "allow",
        "priority": 900,
    }
    data.update(overrides)
    return data


def _write_pack(tmp_path: Path, policies: list[dict]) -> Path:
    path = tmp_path / "pack.yaml"
    path.write_text(yaml.safe_dump({"pack_id": "test_pack", "version": 2, "policies": policies}))
    return path


class TestDefaultPack:
    def test_loads_all_templates(self):
        pack = get_system_policy_pack()
        assert pack.pack_id == "system_policies"
        assert {t.key for t in pack.templates} == EXPECTED_KEYS

    def test_priorities(self):
        pack = get_system_policy_pack()
        assert pack.get("platform_admin_full_access").priority == 1000
        assert pack.get("owner_full_access").priority == 900
        assert pack.get("locked_period_protection").priority == 999
        assert pack.get("soft_close_controller_access").priority == 998
        assert pack.get("soft_close_restriction").priority == 997
        assert pack.get("viewer_read_only").priority == 100

    def test_period_protections_deny_locked_periods(self):
        template = get_system_policy_pack().get("locked_period_protection")
        assert template.effect == PolicyEffect.DENY
        assert template.resource.type == "journal_entry"
        assert template.resource.attributes.period_status == (PeriodStatus.LOCKED,)
        assert "journal_entry:post" in template.action.actions

    def test_soft_close_restriction_ships_inactive(self):
        pack = get_system_policy_pack()
        assert not pack.get("soft_close_restriction").is_active
        assert len(pack.active_templates) == len(pack.templates) - 1

    def test_checksum_stable(self):
        assert get_system_policy_pack().checksum == get_system_policy_pack().checksum
        assert len(get_system_policy_pack().checksum) == 64

    def test_emits_config_trace(self, captured_logs):
        pack = get_system_policy_pack()
        traces = [r for r in captured_logs() if r["message"] == "AUTHZ_CONFIG_TRACE"]
        assert traces[-1]["checksum"] == pack.checksum
        assert traces[-1]["policy_count"] == 8
        assert traces[-1]["active_policy_count"] == 7

    def test_unknown_key_raises(self):
        with pytest.raises(KeyError):
            get_system_policy_pack().get("missing")


class TestLoader:
    def test_checksum_ignores_key_order(self):
        assert compute_checksum({"a": 1, "b": [1, 2]}) == compute_checksum({"b": [1, 2], "a": 1})

    def test_missing_required_field(self):
        data = _template()
        del data["priority"]
        with pytest.raises(KeyError):
            parse_template(data)

    def test_bad_condition(self):
        with pytest.raises(InvalidPolicyConditionError):
            parse_template(_template(subject={"roles": ["root"]}))

    def test_unknown_effect(self):
        with pytest.raises(ValueError):
            parse_template(_template(effect="maybe"))

    def test_load_from_file(self, tmp_path):
        pack = load_system_policy_pack(_write_pack(tmp_path, [_template()]))
        assert pack.version == 2
        assert pack.templates[0].is_active

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            get_system_policy_pack(tmp_path / "absent.yaml")


class TestValidator:
    def test_default_pack_valid(self):
        pack = load_system_policy_pack(
            Path(__file__).resolve().parents[2] / "authz_config" / "packs" / "system_policies.yaml"
        )
        result = validate_system_policy_pack(pack)
        assert result.is_valid, result.errors

    def test_empty_pack(self, tmp_path):
        result = validate_system_policy_pack(load_system_policy_pack(_write_pack(tmp_path, [])))
        assert "Pack contains no policies" in result.errors

    def test_duplicate_keys_and_names(self, tmp_path):
        pack = load_system_policy_pack(_write_pack(tmp_path, [_template(), _template()]))
        result = validate_system_policy_pack(pack)
        assert "Duplicate template key 't'" in result.errors
        assert "Duplicate template name 'Template'" in result.errors

    def test_bad_action_pattern(self, tmp_path):
        pack = load_system_policy_pack(
            _write_pack(tmp_path, [_template(action={"actions": ["widget:spin"]})])
        )
        result = validate_system_policy_pack(pack)
        assert not result.is_valid
        assert "widget:spin" in result.errors[0]

    def test_low_priority_deny_warns(self, tmp_path):
        pack = load_system_policy_pack(
            _write_pack(tmp_path, [_template(effect="deny", priority=200)])
        )
        result = validate_system_policy_pack(pack)
        assert result.is_valid
        assert any("custom policy band" in w for w in result.warnings)

    def test_invalid_pack_rejected_by_entrypoint(self, tmp_path):
        path = _write_pack(tmp_path, [_template(priority=2000)])
        with pytest.raises(ValueError, match="validation failed"):
            get_system_policy_pack(path)
