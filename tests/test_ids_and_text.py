import pytest

from core.errors import MalformedIdentifier
from core.ids import ID_LENGTH, is_valid_id, new_id, validate_ids
from core.text import escape_pattern


def test_new_ids_are_well_formed_and_distinct():
    ids = {new_id() for _ in range(200)}
    assert len(ids) == 200
    assert all(len(value) == ID_LENGTH and is_valid_id(value) for value in ids)


@pytest.mark.parametrize(
    "value",
    ["", "abc", "5a1b2c3d4e5f6a7b8c9d0e1", "5a1b2c3d4e5f6a7b8c9d0e1f2", "zzzzzzzzzzzzzzzzzzzzzzzz", None, 12],
)
def test_is_valid_id_rejects_malformed_tokens(value):
    assert not is_valid_id(value)


def test_validate_ids_accepts_missing_and_empty_batches():
    assert validate_ids(None) is None
    assert validate_ids([]) is None
    assert validate_ids(["5A1B2C3D4E5F6A7B8C9D0E1F", new_id()]) is None


def test_one_bad_token_fails_the_whole_batch():
    with pytest.raises(MalformedIdentifier) as excinfo:
        validate_ids([new_id(), "not-an-id", new_id()])
    assert excinfo.value.status_code == 400
    assert excinfo.value.to_payload() == {"status": 400, "message": "Malformed object ID"}


def test_escape_pattern_escapes_every_metacharacter():
    assert escape_pattern("a-b[c]{d}(e)*+?.,\\^$|#f g") == (
        "a\\-b\\[c\\]\\{d\\}\\(e\\)\\*\\+\\?\\.\\,\\\\\\^\\$\\|\\#f\\ g"
    )


def test_escape_pattern_leaves_plain_text_alone():
    assert escape_pattern("") == ""
    assert escape_pattern("Tomato") == "Tomato"
    assert escape_pattern("tab\there") == "tab\\\there"
