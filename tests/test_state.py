import json

import pytest

from crchost.state import GlobalState, StateError, new_global_state


def test_new_state_creates_file(tmp_path):
    path = tmp_path / "state.json"
    state = new_global_state(path)
    assert state.dns_pid == 0
    assert json.loads(path.read_text()) == {"DnsPID": 0}


def test_written_format_uses_tabs(tmp_path):
    path = tmp_path / "state.json"
    new_global_state(path)
    assert path.read_text() == '{\n\t"DnsPID": 0\n}'


def test_round_trip(tmp_path):
    path = tmp_path / "state.json"
    state = new_global_state(path)
    state.dns_pid = 4242
    state.write()
    loaded = new_global_state(path)
    assert loaded.dns_pid == 4242
    assert loaded.file_path == str(path)


def test_key_matching_ignores_case(tmp_path):
    path = tmp_path / "state.json"
    path.write_text('{"dnspid": 7}')
    assert new_global_state(path).dns_pid == 7


def test_invalid_json_raises(tmp_path):
    path = tmp_path / "state.json"
    path.write_text("{not json")
    with pytest.raises(StateError, match="Invalid JSON"):
        new_global_state(path)


def test_wrong_type_raises(tmp_path):
    path = tmp_path / "state.json"
    path.write_text('{"DnsPID": "abc"}')
    with pytest.raises(StateError):
        new_global_state(path)


def test_delete(tmp_path):
    path = tmp_path / "state.json"
    state = new_global_state(path)
    state.delete()
    assert not path.exists()
    with pytest.raises(FileNotFoundError):
        GlobalState(str(path)).delete()