"""Tests for side-effect classification."""

from __future__ import annotations

from inline_require.registry import SideEffectRegistry


class TestClassify:
    def test_explicit_flag_wins_over_policy(self):
        reg = SideEffectRegistry()
        assert reg.classify("lodash", True, "./node_modules/lodash-es/index.js") is True
        assert reg.classify("./a.js", False, "./src/a.js") is False

    def test_non_boolean_flag_falls_back_to_policy(self):
        reg = SideEffectRegistry()
        assert reg.classify("dep", "false", "./node_modules/dep/index.js") is False
        assert reg.classify("local", "true", "./src/a.js") is True

    def test_default_policy_local_script(self):
        reg = SideEffectRegistry()
        assert reg.classify("./src/a.ts", None, "./src/a.ts") is True

    def test_default_policy_dependency(self):
        reg = SideEffectRegistry()
        assert reg.classify("react", None, "./node_modules/react/index.js") is False

    def test_default_policy_non_script(self):
        reg = SideEffectRegistry()
        assert reg.classify("./a.css", None, "./src/a.css") is False

    def test_first_classification_is_kept(self):
        reg = SideEffectRegistry()
        reg.classify("1", True, "./a.js")
        assert reg.classify("1", False, "./node_modules/a.js") is True
        assert reg.is_side_effect_free("1") is True

    def test_none_id_is_skipped(self):
        reg = SideEffectRegistry()
        assert reg.classify(None, True, "./a.js") is None
        assert len(reg) == 0

    def test_numeric_ids_match_their_text_form(self):
        reg = SideEffectRegistry()
        reg.classify(17, None, "./a.js")
        assert 17 in reg
        assert reg.is_side_effect_free("17") is True


class TestLookup:
    def test_unknown_module_has_side_effects(self):
        assert SideEffectRegistry().is_side_effect_free("./missing.js") is False

    def test_none_has_side_effects(self):
        assert SideEffectRegistry().is_side_effect_free(None) is False


class TestState:
    def test_snapshot_round_trip(self):
        reg = SideEffectRegistry()
        reg.classify("a", True, "./a.js")
        reg.classify("b", False, "./b.js")
        copy = SideEffectRegistry.from_snapshot(reg.snapshot())
        assert copy.snapshot() == {"a": True, "b": False}
        assert copy.fingerprint() == reg.fingerprint()

    def test_snapshot_is_a_copy(self):
        reg = SideEffectRegistry()
        snap = reg.snapshot()
        snap["x"] = True
        assert "x" not in reg

    def test_fingerprint_changes_with_state(self):
        reg = SideEffectRegistry()
        before = reg.fingerprint()
        reg.classify("a", True, "./a.js")
        assert reg.fingerprint() != before

    def test_fingerprint_stable_for_memoized_call(self):
        reg = SideEffectRegistry()
        reg.classify("a", True, "./a.js")
        before = reg.fingerprint()
        reg.classify("a", False, "./a.js")
        assert reg.fingerprint() == before

    def test_reset(self):
        reg = SideEffectRegistry()
        reg.classify("a", True, "./a.js")
        reg.reset()
        assert len(reg) == 0
        assert reg.is_side_effect_free("a") is False
