import re

WHITESPACE = re.compile(r"\s", flags=re.UNICODE)


def build_username(first_name: str, last_name: str, suffix: int = 0) -> str:
    """
    Build ``first.last`` with an optional numeric disambiguator.

    ``suffix`` is the number of users already registered under the same
    first and last name; 0 means no suffix. All whitespace is dropped and
    the result is lowercased.

    >>> build_username("Ana", "Gomez")
    'ana.gomez'
    >>> build_username("Ana Maria", "De la Cruz", 2)
    'anamaria.delacruz2'
    """
    username = f"{first_name}.{last_name}{suffix}" if suffix > 0 else f"{first_name}.{last_name}"
    return WHITESPACE.sub("", username).lower()
