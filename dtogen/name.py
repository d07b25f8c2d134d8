"""Identifier case conversion"""

import string
from dataclasses import dataclass

_UPPER = frozenset(string.ascii_uppercase)
_LOWER = frozenset(string.ascii_lowercase)


@dataclass(frozen=True)
class Name:
    """An identifier stored in snake_case, convertible to the other styles.

    Conversions are lexical only: a camel/Pascal boundary is inserted before
    an uppercase letter that directly follows a lowercase one.
    """
    snake_case: str

    @classmethod
    def from_snake_case(cls, snake_case: str) -> "Name":
        return cls(snake_case)

    @classmethod
    def from_upper_snake_case(cls, upper_snake_case: str) -> "Name":
        return cls(upper_snake_case.lower())

    @classmethod
    def from_camel_case(cls, camel_case: str) -> "Name":
        out = []
        prev = ""
        for i, ch in enumerate(camel_case):
            if i and ch in _UPPER and prev in _LOWER:
                out.append("_")
            out.append(ch.lower() if ch in _UPPER else ch)
            prev = ch
        return cls("".join(out))

    @classmethod
    def from_pascal_case(cls, pascal_case: str) -> "Name":
        return cls.from_camel_case(pascal_case)

    def as_snake_case(self) -> str:
        return self.snake_case

    def as_upper_snake_case(self) -> str:
        return self.snake_case.upper()

    def as_camel_case(self) -> str:
        out = []
        chars = iter(self.snake_case)
        for ch in chars:
            if ch == "_":
                nxt = next(chars, "")
                out.append(nxt.upper())
            else:
                out.append(ch)
        return "".join(out)

    def as_pascal_case(self) -> str:
        camel = self.as_camel_case()
        return camel[:1].upper() + camel[1:]

    def __str__(self) -> str:
        return self.snake_case
