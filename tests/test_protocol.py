import pytest

from sheetsync.realtime.protocol import FROM_CLIENT, TO_CLIENT, FromClient, ToClient, write_cell_checker


def test_wire_names():
    assert TO_CLIENT[ToClient.AUTH_REQUIRED].name == "authReq"
    assert TO_CLIENT[ToClient.AUTH_REFUSED].name == "authFail"
    assert TO_CLIENT[ToClient.AUTH_SUCCESS].name == "authOk"
    assert TO_CLIENT[ToClient.WRITE_CELL].name == "writeCell"
    assert FROM_CLIENT[FromClient.WRITE_CELL].name == "writeCell"


def test_every_enum_member_has_an_entry():
    assert set(TO_CLIENT) == set(ToClient)
    assert set(FROM_CLIENT) == set(FromClient)


def test_only_auth_request_expects_a_reply():
    expecting = {kind for kind, message in TO_CLIENT.items() if message.expects_reply}
    assert expecting == {ToClient.AUTH_REQUIRED}


def test_tables_are_read_only():
    with pytest.raises(TypeError):
        TO_CLIENT[ToClient.AUTH_SUCCESS] = TO_CLIENT[ToClient.AUTH_REFUSED]


def test_lookup_unknown_event():
    assert FromClient.lookup("writeCell") is FromClient.WRITE_CELL
    assert FromClient.lookup("deleteSheet") is None
    assert FromClient.lookup(None) is None


@pytest.mark.parametrize("payload", [
    {"line": 1, "column": "A", "content": "x"},
    {"line": 0, "column": "", "content": ""},
    {"line": 3, "column": "B", "content": "hello", "extra": True},
])
def test_write_cell_accepts(payload):
    assert write_cell_checker(payload) is True


@pytest.mark.parametrize("payload", [
    {"line": "1", "column": "A", "content": "x"},
    {"line": 1, "column": 2, "content": "x"},
    {"line": 1, "column": "A", "content": 5},
    {"line": 1.5, "column": "A", "content": "x"},
    {"line": True, "column": "A", "content": "x"},
    {"column": "A", "content": "x"},
    {"line": 1, "content": "x"},
    {"line": 1, "column": "A"},
    [1, "A", "x"],
    "writeCell",
    None,
])
def test_write_cell_rejects(payload):
    assert write_cell_checker(payload) is False
