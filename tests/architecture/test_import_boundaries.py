"""
Import-boundary enforcement for the authorization packages.

1. Engine purity: authz_engines/** may not import the DB, ORM, models,
   services, or config layers.
2. Engine no-impure: authz_engines/** may not call wall-clock or
   environment functions.
3. Domain purity: authz_kernel/domain/** may not import SQLAlchemy or
   the kernel's db/models packages.
4. Config centralisation: only authz_config/ may import its loader and
   validator sub-modules.
5. Dependency direction: validates the full dependency DAG.

All scanning is done via AST; these tests are read-only.
"""

import ast
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[2]
PACKAGES = ("authz_kernel", "authz_engines", "authz_config", "authz_services")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _python_files(root: str) -> list[Path]:
    """Return all .py files under *root*, sorted for deterministic order."""
    return sorted((REPO_ROOT / root).rglob("*.py"))


def _relative(filepath: Path) -> str:
    return filepath.relative_to(REPO_ROOT).as_posix()


def _parse(filepath: Path) -> ast.AST | None:
    try:
        return ast.parse(filepath.read_text(), filename=str(filepath))
    except (SyntaxError, UnicodeDecodeError):
        return None


def _extract_imports(filepath: Path) -> list[tuple[int, str]]:
    """Return (line_number, module_string) for every import in *filepath*."""
    tree = _parse(filepath)
    if tree is None:
        return []

    results: list[tuple[int, str]] = []
    for node in ast.walk(tree):
        if isinstance(node, ast.Import):
            for alias in node.names:
                results.append((node.lineno, alias.name))
        elif isinstance(node, ast.ImportFrom):
            if node.module:
                results.append((node.lineno, node.module))
    return results


def _matches_any(module: str, prefixes: tuple[str, ...]) -> bool:
    """True if *module* equals or is a child of any prefix."""
    for prefix in prefixes:
        if module == prefix or module.startswith(f"{prefix}."):
            return True
    return False


def _extract_attribute_calls(filepath: Path) -> list[tuple[int, str]]:
    """Return (line_number, 'receiver.attr') for two-level attribute references."""
    tree = _parse(filepath)
    if tree is None:
        return []

    results: list[tuple[int, str]] = []
    for node in ast.walk(tree):
        if isinstance(node, ast.Attribute) and isinstance(node.value, ast.Name):
            results.append((node.lineno, f"{node.value.id}.{node.attr}"))
    return results


def _violations(root: str, forbidden: tuple[str, ...]) -> list[str]:
    found: list[str] = []
    for filepath in _python_files(root):
        for lineno, module in _extract_imports(filepath):
            if _matches_any(module, forbidden):
                found.append(f"  {_relative(filepath)}:{lineno} imports '{module}'")
    return found


# ---------------------------------------------------------------------------
# 1. TestEnginePurity
# ---------------------------------------------------------------------------

class TestEnginePurity:
    """authz_engines/** may not import DB drivers, ORM, kernel models/db,
    services, or config."""

    FORBIDDEN_PREFIXES = (
        "sqlalchemy",
        "sqlite3",
        "yaml",
        "authz_kernel.models",
        "authz_kernel.db",
        "authz_services",
        "authz_config",
    )

    def test_engine_files_have_no_forbidden_imports(self):
        violations = _violations("authz_engines", self.FORBIDDEN_PREFIXES)
        assert not violations, (
            "Engine purity violation: authz_engines/** must not import "
            "DB drivers, ORM, kernel models/db, services, or config:\n"
            + "\n".join(violations)
        )


# ---------------------------------------------------------------------------
# 2. TestEngineNoImpureFunctions
# ---------------------------------------------------------------------------

class TestEngineNoImpureFunctions:
    """authz_engines/** may not call wall-clock or environment functions.

    Allowed (observational-only):
        time.monotonic
    """

    FORBIDDEN_CALLS = frozenset({
        "datetime.now",
        "datetime.utcnow",
        "date.today",
        "time.time",
        "os.environ",
        "os.getenv",
    })

    def test_no_impure_calls_in_engines(self):
        violations: list[str] = []
        for filepath in _python_files("authz_engines"):
            for lineno, qualname in _extract_attribute_calls(filepath):
                if qualname in self.FORBIDDEN_CALLS:
                    violations.append(f"  {_relative(filepath)}:{lineno} calls '{qualname}'")

        assert not violations, (
            "Engine impurity violation: authz_engines/** must not call "
            "wall-clock or environment functions.  Take a datetime or an "
            "EnvironmentContext parameter instead:\n" + "\n".join(violations)
        )


# ---------------------------------------------------------------------------
# 3. TestDomainPurity
# ---------------------------------------------------------------------------

class TestDomainPurity:
    """authz_kernel/domain/** is pure: no ORM, no persistence."""

    FORBIDDEN_PREFIXES = (
        "sqlalchemy",
        "yaml",
        "authz_kernel.db",
        "authz_kernel.models",
    )

    def test_domain_has_no_persistence_imports(self):
        violations = _violations("authz_kernel/domain", self.FORBIDDEN_PREFIXES)
        assert not violations, (
            "Domain purity violation: authz_kernel/domain/** must not "
            "import persistence layers:\n" + "\n".join(violations)
        )


# ---------------------------------------------------------------------------
# 4. TestConfigCentralization
# ---------------------------------------------------------------------------

class TestConfigCentralization:
    """Only authz_config/ may import its internal sub-modules.

    Other packages go through ``authz_config.get_system_policy_pack`` and may
    reference ``authz_config.schema`` for types.
    """

    FORBIDDEN_INTERNAL_MODULES = (
        "authz_config.loader",
        "authz_config.validator",
    )

    def test_no_external_import_of_config_internals(self):
        violations: list[str] = []
        for package in PACKAGES:
            if package == "authz_config":
                continue
            violations.extend(_violations(package, self.FORBIDDEN_INTERNAL_MODULES))

        assert not violations, (
            "Config centralisation violation: only authz_config/ may "
            "import its loader and validator:\n" + "\n".join(violations)
        )


# ---------------------------------------------------------------------------
# 5. TestDependencyDirection
# ---------------------------------------------------------------------------

class TestDependencyDirection:
    """Verify the overall dependency DAG:

    Allowed edges (→ means "may import"):
        authz_services → authz_kernel, authz_engines, authz_config
        authz_config   → authz_kernel.domain, authz_kernel.exceptions
        authz_engines  → authz_kernel.domain, authz_kernel.exceptions,
                         authz_kernel.logging_config
        authz_kernel   → (sqlalchemy + internal)
    """

    # (source_root, forbidden_prefixes)
    RULES: list[tuple[str, tuple[str, ...]]] = [
        (
            "authz_engines",
            (
                "authz_kernel.models",
                "authz_kernel.db",
                "authz_services",
                "authz_config",
            ),
        ),
        (
            "authz_kernel",
            (
                "authz_services",
                "authz_config",
                "authz_engines",
            ),
        ),
        (
            "authz_config",
            (
                "authz_services",
                "authz_engines",
                "authz_kernel.models",
                "authz_kernel.db",
            ),
        ),
    ]

    def test_dependency_dag(self):
        violations: list[str] = []
        for source_root, forbidden in self.RULES:
            violations.extend(
                f"  [{source_root}]{line[1:]}" for line in _violations(source_root, forbidden)
            )

        assert not violations, (
            "Dependency direction violation: the following imports break "
            "the layered architecture DAG:\n" + "\n".join(violations)
        )

    def test_every_package_scanned(self):
        for package in PACKAGES:
            assert _python_files(package), f"{package} has no Python files"
