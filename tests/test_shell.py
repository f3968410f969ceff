import pytest

from crchost.shell import (
    ShellConfig,
    UnsupportedShellError,
    generate_usage_hint,
    get_prefix_suffix_delimiter_for_set,
    get_shell,
    is_supported_shell,
    supported_shells,
)


def test_bash_set_config():
    config = get_prefix_suffix_delimiter_for_set("bash")
    assert config == ShellConfig("export ", '="', '"\n', ':$PATH"\n')


def test_unknown_shell_uses_posix_config():
    assert get_prefix_suffix_delimiter_for_set("fish") == get_prefix_suffix_delimiter_for_set("bash")


def test_powershell_set_config():
    config = get_prefix_suffix_delimiter_for_set("powershell")
    assert config.prefix == "$Env:"
    assert config.path_suffix == ";" + config.prefix + "PATH" + config.suffix


def test_cmd_set_config():
    config = get_prefix_suffix_delimiter_for_set("cmd")
    assert config.prefix == "SET "
    assert config.delimiter == "="
    assert config.path_suffix == ";%PATH%" + config.suffix


def test_posix_usage_hint():
    assert generate_usage_hint("bash", "crc oc-env") == (
        "# Run this command to configure your shell:\n# eval $(crc oc-env)\n"
    )


def test_cmd_usage_hint():
    hint = generate_usage_hint("cmd", "crc oc-env")
    assert hint.startswith("REM Run this command to configure your shell:\nREM \t@FOR")
    assert "%i IN ('crc oc-env') DO @call %i" in hint


def test_powershell_usage_hint():
    hint = generate_usage_hint("powershell", "crc oc-env")
    assert hint.startswith("# ")
    assert "& crc oc-env | Invoke-Expression" in hint


def test_supported_shells_are_accepted():
    shells = supported_shells()
    assert len(shells) == 2
    for shell in shells:
        assert is_supported_shell(shell)
        assert get_shell(shell) == shell


def test_unsupported_shell_raises():
    assert not is_supported_shell("fish")
    with pytest.raises(UnsupportedShellError, match="is not a supported shell"):
        get_shell("fish")


def test_detect_from_environment(monkeypatch):
    monkeypatch.setenv("SHELL", "/usr/bin/zsh")
    assert get_shell("") == "zsh"