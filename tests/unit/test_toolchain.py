"""
Unit tests for the toolchain descriptors.

This module tests the descriptors and detection defined in sob.utils.toolchain.
"""

import dataclasses
import shlex

import pytest
from sob.errors import ToolchainNotFound
from sob.utils.toolchain import (
    CLANG, CLANG_CL, DESCRIPTORS, GCC, MSVC,
    Toolchain, ToolchainDetector, select_descriptor,
)


class TestObjectPaths:
    """Tests for object path naming."""

    def test_gcc_object_path(self):
        """Test that gcc objects get a .o extension under build/."""
        assert GCC.object_path_for("a.cpp") == "build/a.o"

    def test_msvc_object_path(self):
        """Test that msvc objects get a .obj extension under build/."""
        assert MSVC.object_path_for("a.cpp") == "build/a.obj"

    def test_object_path_is_deterministic(self):
        """Test that the same inputs always give the same object path."""
        assert GCC.object_path_for("src/x.cpp") == GCC.object_path_for("src/x.cpp")

    def test_subdirectories_are_kept(self):
        """Test that source subdirectories are mirrored under build/."""
        assert GCC.object_path_for("src/util/str.cpp") == "build/src/util/str.o"

    def test_windows_separators(self):
        """Test that backslash paths become forward-slash object paths."""
        assert MSVC.object_path_for("src\\main.cpp") == "build/src/main.obj"

    def test_absolute_path_stays_under_build_dir(self):
        """Test that an absolute source path cannot escape the build dir."""
        assert GCC.object_path_for("/home/me/a.cpp") == "build/home/me/a.o"

    def test_parent_segments_are_dropped(self):
        """Test that '..' segments are folded away."""
        assert GCC.object_path_for("../lib/a.cpp") == "build/lib/a.o"

    def test_subdir(self):
        """Test that a per-target subdirectory is inserted under build/."""
        assert GCC.object_path_for("a.cpp", subdir="app") == "build/app/a.o"

    def test_only_last_suffix_is_replaced(self):
        """Test that only the final extension is swapped."""
        assert GCC.object_path_for("a.test.cpp") == "build/a.test.o"


class TestCommands:
    """Tests for compile and link command construction."""

    def test_gcc_compile(self):
        """Test the gcc compile command."""
        assert GCC.compile_command("a.cpp") == "g++ -c a.cpp -o build/a.o"

    def test_gcc_link(self):
        """Test the gcc link command keeps object order."""
        cmd = GCC.link_command(["build/a.o", "build/b.o"], "app")
        assert cmd == "g++ build/a.o build/b.o -o app"

    def test_msvc_compile_has_standard_flag(self):
        """Test that the msvc compile command carries /std:c++17."""
        assert MSVC.compile_command("a.cpp") == "cl /c /std:c++17 a.cpp /Fo:build/a.obj"

    def test_msvc_link(self):
        """Test the msvc link command uses /Fe: and .exe."""
        cmd = MSVC.link_command(["build/a.obj", "build/b.obj"], "app")
        assert cmd == "cl build/a.obj build/b.obj /Fe:app.exe"

    def test_compile_flags_not_used_for_link(self):
        """Test that compile-phase flags stay out of the link command."""
        assert "/std:c++17" not in MSVC.link_command(["build/a.obj"], "app")

    def test_link_flags_not_used_for_compile(self):
        """Test that link-phase flags stay out of the compile command."""
        gcc = GCC.with_flags(ldflags=["-lm"])
        assert "-lm" not in gcc.compile_command("a.cpp")
        assert gcc.link_command(["build/a.o"], "app") == "g++ build/a.o -o app -lm"

    def test_explicit_object_path(self):
        """Test compiling to a caller-chosen object path."""
        assert GCC.compile_command("a.cpp", "out/a.o") == "g++ -c a.cpp -o out/a.o"

    def test_clang_uses_gcc_conventions(self):
        """Test that clang++ shares the gcc flag spelling."""
        assert CLANG.compile_command("a.cpp") == "clang++ -c a.cpp -o build/a.o"

    def test_clang_cl_uses_msvc_conventions(self):
        """Test that clang-cl shares the msvc flag spelling."""
        assert CLANG_CL.compile_command("a.cpp") == "clang-cl /c /std:c++17 a.cpp /Fo:build/a.obj"

    def test_artifact_suffix_not_doubled(self):
        """Test that a name already ending in .exe is left alone."""
        assert MSVC.artifact_path_for("app.exe") == "app.exe"


class TestQuoting:
    """Tests for paths containing spaces and shell characters."""

    def test_gcc_compile_with_spaces(self):
        """Test that a source path with spaces stays one argument."""
        cmd = GCC.compile_command("my src/a b.cpp")
        assert shlex.split(cmd) == ["g++", "-c", "my src/a b.cpp", "-o", "build/my src/a b.o"]

    def test_gcc_link_with_spaces(self):
        """Test that object and artifact paths with spaces stay one argument each."""
        cmd = GCC.link_command(["build/my src/a b.o", "build/c.o"], "my app")
        assert shlex.split(cmd) == ["g++", "build/my src/a b.o", "build/c.o", "-o", "my app"]

    def test_gcc_shell_characters_quoted(self):
        """Test that shell metacharacters in a path are not interpreted."""
        cmd = GCC.compile_command("a;rm.cpp")
        assert shlex.split(cmd)[2] == "a;rm.cpp"

    def test_msvc_paths_with_spaces(self):
        """Test that msvc commands double-quote paths with spaces."""
        cmd = MSVC.compile_command("my src/a.cpp")
        assert cmd == 'cl /c /std:c++17 "my src/a.cpp" /Fo:"build/my src/a.obj"'
        link = MSVC.link_command(["build/my src/a.obj"], "my app")
        assert link == 'cl "build/my src/a.obj" /Fe:"my app.exe"'

    def test_link_flags_not_quoted(self):
        """Test that command substitutions in link flags are passed through."""
        flag = "`llvm-config --ldflags`"
        cmd = GCC.with_flags(ldflags=[flag]).link_command(["build/a.o"], "app")
        assert cmd.endswith(" " + flag)


class TestDescriptorImmutability:
    """Tests that descriptors are never mutated."""

    def test_frozen(self):
        """Test that descriptor fields cannot be assigned."""
        with pytest.raises(dataclasses.FrozenInstanceError):
            GCC.cxx = "c++"

    def test_with_flags_returns_copy(self):
        """Test that with_flags leaves the original descriptor alone."""
        extended = GCC.with_flags(cxxflags=["-O2"])
        assert extended.cxxflags == ("-O2",)
        assert GCC.cxxflags == ()

    def test_with_flags_appends(self):
        """Test that extra flags follow the built-in ones."""
        extended = MSVC.with_flags(cxxflags=["/EHsc"])
        assert extended.cxxflags == ("/std:c++17", "/EHsc")

    def test_with_build_prefix(self):
        """Test moving objects to another build directory."""
        out = GCC.with_build_prefix("out")
        assert out.object_path_for("a.cpp") == "out/a.o"
        assert GCC.build_prefix == "build/"


class TestDetection:
    """Tests for ToolchainDetector and select_descriptor."""

    @staticmethod
    def which_for(*names):
        return lambda cmd: f"/usr/bin/{cmd}" if cmd in names else None

    def test_detect_first_in_priority(self):
        """Test that the first available toolchain wins."""
        detector = ToolchainDetector(
            priority=[Toolchain.GCC, Toolchain.CLANG],
            which=self.which_for("g++", "clang++"),
        )
        assert detector.detect() == Toolchain.GCC

    def test_detect_skips_missing(self):
        """Test that unavailable toolchains are skipped."""
        detector = ToolchainDetector(
            priority=[Toolchain.MSVC, Toolchain.CLANG],
            which=self.which_for("clang++"),
        )
        assert detector.detect() == Toolchain.CLANG

    def test_detect_none(self):
        """Test detection on a host without compilers."""
        detector = ToolchainDetector(which=self.which_for())
        assert detector.detect() is None
        assert detector.list_available() == []

    def test_exe_suffix_lookup(self):
        """Test that the .exe name is tried as well."""
        detector = ToolchainDetector(which=self.which_for("cl.exe"))
        assert detector.get_compiler_path(Toolchain.MSVC) == "/usr/bin/cl.exe"

    def test_select_explicit(self):
        """Test selecting a toolchain by name."""
        assert select_descriptor("msvc") is MSVC

    def test_select_auto(self):
        """Test selecting the detected toolchain."""
        detector = ToolchainDetector(priority=[Toolchain.GCC], which=self.which_for("g++"))
        assert select_descriptor("auto", detector) is GCC

    def test_select_auto_nothing_found(self):
        """Test that auto without a compiler raises ToolchainNotFound."""
        detector = ToolchainDetector(which=self.which_for())
        with pytest.raises(ToolchainNotFound):
            select_descriptor("auto", detector)

    def test_select_unknown(self):
        """Test that an unknown toolchain name is a ValueError."""
        with pytest.raises(ValueError, match="Unknown toolchain"):
            select_descriptor("tcc")

    def test_every_toolchain_has_descriptor(self):
        """Test that each Toolchain value maps to a matching descriptor."""
        for tc in Toolchain:
            assert DESCRIPTORS[tc].name == tc.value
