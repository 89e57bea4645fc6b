import pytest

from user.username import build_username


@pytest.mark.parametrize(
    ("first_name", "last_name", "suffix", "expected"),
    [
        ("Ana", "Gomez", 0, "ana.gomez"),
        ("Ana", "Gomez", 1, "ana.gomez1"),
        ("Ana", "Gomez", 12, "ana.gomez12"),
        ("Ana Maria", "De la Cruz", 0, "anamaria.delacruz"),
        ("  Jean\tLuc ", "Picard", 3, "jeanluc.picard3"),
        ("ÉLODIE", "Dupré", 0, "élodie.dupré"),
    ],
)
def test_build_username(first_name, last_name, suffix, expected):
    assert build_username(first_name, last_name, suffix) == expected
