import os
import stat
import sys

import pytest

from crchost import osutil
from crchost.osutil import OS, CommandError


def test_replace_env_replaces_in_place():
    result = osutil.replace_env(["A=1", "LANG=en_US", "B=2"], "LANG", "C")
    assert result == ["A=1", "LANG=C", "B=2"]


def test_replace_env_does_not_add_missing_variable():
    result = osutil.replace_env(["A=1", "B=2"], "LANG", "C")
    assert result == ["A=1", "B=2"]


def test_replace_env_matches_name_only():
    result = osutil.replace_env(["X=a=b", "XY=1"], "X", "C")
    assert result == ["X=C", "XY=1"]


@pytest.mark.parametrize(
    "platform, expected",
    [("linux", "linux"), ("darwin", "darwin"), ("win32", "windows")],
)
def test_current_os_string_value(monkeypatch, platform, expected):
    monkeypatch.setattr(sys, "platform", platform)
    assert str(osutil.current_os()) == expected


@pytest.mark.parametrize(
    "platform, expected",
    [("linux", OS.LINUX), ("darwin", OS.DARWIN), ("win32", OS.WINDOWS)],
)
def test_current_os(monkeypatch, platform, expected):
    monkeypatch.setattr(sys, "platform", platform)
    assert osutil.current_os() is expected


def test_current_os_unknown(monkeypatch):
    monkeypatch.setattr(sys, "platform", "plan9")
    with pytest.raises(RuntimeError, match="Unexpected OS type"):
        osutil.current_os()


def test_run_with_default_locale_sets_c_locale(monkeypatch):
    monkeypatch.setenv("LC_ALL", "en_US.UTF-8")
    monkeypatch.setenv("LANG", "en_US.UTF-8")
    stdout, _ = osutil.run_with_default_locale(
        sys.executable, "-c", "import os; print(os.environ['LC_ALL'], os.environ['LANG'])"
    )
    assert stdout.strip() == "C C"


def test_run_with_default_locale_does_not_add_absent_variable(monkeypatch):
    monkeypatch.delenv("LC_ALL", raising=False)
    stdout, _ = osutil.run_with_default_locale(
        sys.executable, "-c", "import os; print('LC_ALL' in os.environ)"
    )
    assert stdout.strip() == "False"


def test_run_with_default_locale_failure_carries_output():
    with pytest.raises(CommandError) as info:
        osutil.run_with_default_locale(
            sys.executable, "-c", "import sys; sys.stderr.write('bad'); sys.exit(3)"
        )
    assert info.value.returncode == 3
    assert info.value.stderr == "bad"
    assert str(info.value) == "exit status 3"


def test_run_with_default_locale_missing_command(tmp_path):
    with pytest.raises(CommandError):
        osutil.run_with_default_locale(str(tmp_path / "no-such-command"))


def test_run_with_privilege_without_sudo(monkeypatch, tmp_path):
    monkeypatch.setenv("PATH", str(tmp_path))
    with pytest.raises(CommandError, match="sudo"):
        osutil.run_with_privilege("ls")


def test_run_with_privilege_uses_sudo(monkeypatch, tmp_path):
    fake_sudo = tmp_path / "sudo"
    fake_sudo.write_text('#!/bin/sh\necho "$@"\n')
    fake_sudo.chmod(0o755)
    monkeypatch.setenv("PATH", str(tmp_path))
    stdout, stderr = osutil.run_with_privilege("ls", "-l")
    assert stdout == "ls -l\n"
    assert stderr == ""


def test_current_executable_is_running_interpreter():
    path = osutil.current_executable()
    assert os.path.realpath(path) == os.path.realpath(sys.executable)


def test_copy_file_contents(tmp_path):
    src = tmp_path / "src.bin"
    dst = tmp_path / "dst.bin"
    src.write_bytes(b"\x00payload\xff")
    osutil.copy_file_contents(src, dst, 0o600)
    assert dst.read_bytes() == b"\x00payload\xff"
    assert stat.S_IMODE(dst.stat().st_mode) == 0o600


def test_copy_file_contents_missing_source(tmp_path):
    with pytest.raises(OSError, match="Cannot open src file"):
        osutil.copy_file_contents(tmp_path / "missing", tmp_path / "dst", 0o644)
    assert not (tmp_path / "dst").exists()


def test_copy_file_contents_bad_destination(tmp_path):
    src = tmp_path / "src"
    src.write_bytes(b"x")
    with pytest.raises(OSError, match="Cannot create dst file"):
        osutil.copy_file_contents(src, tmp_path / "nodir" / "dst", 0o644)


def test_write_file_if_content_changed(tmp_path):
    target = tmp_path / "file.conf"
    assert osutil.write_file_if_content_changed(target, b"one\n", 0o644) is True
    assert target.read_bytes() == b"one\n"
    assert osutil.write_file_if_content_changed(target, b"one\n", 0o644) is False
    assert osutil.write_file_if_content_changed(target, b"two", 0o644) is True
    assert target.read_bytes() == b"two"