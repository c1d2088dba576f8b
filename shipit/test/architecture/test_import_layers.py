from __future__ import annotations

import pytest

from ._gate import require_arch_checks_enabled
from ._utils import iter_source_files, matches_prefix, package_root, parse_imports

# layer -> shipit packages it must not import
FORBIDDEN: dict[str, tuple[str, ...]] = {
    "core": ("shipit.platform", "shipit.git", "shipit.output", "shipit.services", "shipit.cli"),
    "platform": ("shipit.git", "shipit.output", "shipit.services", "shipit.cli"),
    "git": ("shipit.output", "shipit.services", "shipit.cli"),
    "output": ("shipit.platform", "shipit.git", "shipit.services", "shipit.cli"),
    "services": ("shipit.cli",),
}


@pytest.mark.parametrize("layer", sorted(FORBIDDEN))
def test_layer_does_not_import_upwards(layer: str) -> None:
    require_arch_checks_enabled()

    root = package_root()
    offenders: list[str] = []
    for file_path in iter_source_files(root / layer):
        rel = file_path.relative_to(root)
        for item in parse_imports(file_path):
            for prefix in FORBIDDEN[layer]:
                if matches_prefix(item.module, prefix):
                    offenders.append(f"{rel}:{item.line}: forbidden import '{item.module}'")

    assert not offenders, f"{layer} layering violations:\n" + "\n".join(offenders)


def test_typer_is_confined_to_cli() -> None:
    require_arch_checks_enabled()

    root = package_root()
    offenders: list[str] = []
    for file_path in iter_source_files(root):
        rel = file_path.relative_to(root)
        if rel.parts[0] == "cli":
            continue
        for item in parse_imports(file_path):
            if matches_prefix(item.module, "typer"):
                offenders.append(f"{rel}:{item.line}: typer import outside cli")

    assert not offenders, "\n".join(offenders)
