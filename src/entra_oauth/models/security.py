"""PKCE verifier/challenge pair sent across the two legs of the code grant."""

from __future__ import annotations

from dataclasses import dataclass

SUPPORTED_CODE_CHALLENGE_METHODS = ("S256", "plain")
_MIN_LENGTH, _MAX_LENGTH = 43, 128


@dataclass(frozen=True)
class PKCEParameters:
    """Verifier and derived challenge (RFC 7636).

    ``code_challenge`` and ``code_challenge_method`` go into the authorization
    URL; ``code_verifier`` is presented again when the code is redeemed.
    """

    code_verifier: str
    code_challenge: str
    code_challenge_method: str = "S256"

    def __post_init__(self) -> None:
        for name in ("code_verifier", "code_challenge"):
            length = len(getattr(self, name))
            if not _MIN_LENGTH <= length <= _MAX_LENGTH:
                raise ValueError(
                    f"{name} must be {_MIN_LENGTH}-{_MAX_LENGTH} characters, got {length}"
                )
        if self.code_challenge_method not in SUPPORTED_CODE_CHALLENGE_METHODS:
            raise ValueError(
                f"Unsupported code challenge method: {self.code_challenge_method}"
            )
