"""Tests for contractkit.environment."""

from __future__ import annotations

import pytest
from conftest import make_project
from pydantic import ValidationError

from contractkit.environment import DEFAULT_RUNTIME_PACKAGE, resolve
from contractkit.targets import BuildTarget


def _snapshot(root):
    return sorted(str(p.relative_to(root)) for p in root.rglob("*"))


class TestResolve:
    def test_checkout_layout(self, tmp_path):
        root = make_project(tmp_path)
        env = resolve(root)
        assert env.is_installed_package is False
        assert env.package_root == root.resolve()
        assert env.project_root == root.resolve()

    def test_installed_layout(self, tmp_path):
        root = make_project(tmp_path, installed=True)
        env = resolve(root)
        assert env.is_installed_package is True
        assert env.package_root == root.resolve() / "node_modules" / DEFAULT_RUNTIME_PACKAGE

    def test_custom_runtime_package(self, tmp_path):
        (tmp_path / "node_modules" / "my-runtime").mkdir(parents=True)
        assert resolve(tmp_path, "my-runtime").is_installed_package is True
        assert resolve(tmp_path).is_installed_package is False

    def test_typed_project_marker(self, tmp_path):
        root = make_project(tmp_path, typed=True)
        assert resolve(root).is_typed_project is True

    def test_untyped_project(self, tmp_path):
        assert resolve(tmp_path).is_typed_project is False

    def test_empty_directory_is_valid(self, tmp_path):
        env = resolve(tmp_path)
        assert env.is_installed_package is False
        assert env.is_typed_project is False

    def test_resolve_does_not_write(self, tmp_path):
        root = make_project(tmp_path, installed=True, typed=True)
        before = _snapshot(root)
        resolve(root)
        assert _snapshot(root) == before

    def test_context_is_immutable(self, tmp_path):
        env = resolve(tmp_path)
        with pytest.raises(ValidationError):
            env.is_installed_package = True


class TestPaths:
    def test_output_dirs(self, tmp_path):
        env = resolve(tmp_path)
        root = tmp_path.resolve()
        assert env.build_dir == root / "build"
        assert env.build_lib_dir == root / "build" / "lib"
        assert env.dist_dir == root / "dist"

    def test_artifacts(self, tmp_path):
        env = resolve(tmp_path)
        root = tmp_path.resolve()
        assert env.artifact_path(BuildTarget.NODE) == root / "build" / "lib" / "node-wrapper.js"
        assert env.artifact_path(BuildTarget.WASM) == root / "build" / "build.wasm"

    def test_templates_follow_package_root(self, tmp_path):
        env = resolve(make_project(tmp_path, installed=True))
        assert env.template_path(BuildTarget.WASM) == env.package_root / "dist" / "lib" / "wasm-wrapper.js"
        assert env.helpers_path.is_file()
        assert env.script_path("sys_check.sh").is_file()

    def test_bundler_config_installed(self, tmp_path):
        env = resolve(make_project(tmp_path, installed=True))
        assert env.bundler_config(BuildTarget.NODE).name == "webpack.config.node.cjs"

    def test_bundler_config_checkout_uses_dev_variant(self, tmp_path):
        env = resolve(make_project(tmp_path))
        assert env.bundler_config(BuildTarget.WASM).name == "webpack.config.wasm.dev.cjs"

    def test_examples_dir_depends_on_typing(self, tmp_path):
        untyped = resolve(tmp_path)
        assert untyped.examples_dir == tmp_path.resolve() / "dist" / "examples"
        (tmp_path / "tsconfig.json").write_text("{}")
        typed = resolve(tmp_path)
        assert typed.examples_dir == tmp_path.resolve() / "examples"
        assert typed.contract_suffix == ".ts"

    def test_compiled_contract_typed(self, tmp_path):
        (tmp_path / "tsconfig.json").write_text("{}")
        env = resolve(tmp_path)
        contract = tmp_path / "example-contract.ts"
        assert env.compiled_contract_path(contract) == env.dist_dir / "example-contract.js"

    def test_compiled_contract_untyped_is_source(self, tmp_path):
        env = resolve(tmp_path)
        contract = tmp_path / "example-contract.js"
        assert env.compiled_contract_path(contract) == contract
