from typing import Any, Optional, Callable
from collections.abc import Iterable, Iterator, Mapping, MutableMapping
import orjson
from pydantic import BaseModel, Field
from .exceptions import BadPasswordOrCorruptData


class SecretDefinition(BaseModel):
    """SecretDefinition.

    A secret the protected service needs, and the generator that produces
    its default value when the vault does not hold it yet.
    """
    key: str = Field(min_length=1)
    generator: Callable[[], str]

    model_config = {"frozen": True}


def validate_definitions(definitions: Iterable[SecretDefinition]) -> list[SecretDefinition]:
    """Return the definitions as a list, rejecting duplicated keys.

    Raises:
        ValueError: If two definitions share the same key.
    """
    seen: set[str] = set()
    result = []
    for definition in definitions:
        if definition.key in seen:
            raise ValueError(
                f"Secret key {definition.key!r} is defined more than once"
            )
        seen.add(definition.key)
        result.append(definition)
    return result


class SecretSet(MutableMapping[str, str]):
    """Secrets dict-like object.

    Maps secret keys to string values. Tracks whether it was modified
    since it was loaded, so the store only rewrites the vault when needed.
    """

    def __init__(
        self,
        data: Optional[Mapping[str, str]] = None,
        new: bool = False
    ) -> None:
        self._data: dict[str, str] = {}
        if data is not None:
            for key, value in data.items():
                self._validate(key, value)
                self._data[key] = value
        # a fresh set has never been persisted.
        self._changed = bool(new)

    def __repr__(self) -> str:
        # never expose values.
        return f'<SecretSet keys={sorted(self._data)!r} changed={self._changed}>'

    @staticmethod
    def _validate(key: Any, value: Any) -> None:
        if not isinstance(key, str) or not key:
            raise ValueError("Secret key must be a non-empty string")
        if not isinstance(value, str):
            raise TypeError(
                f"Secret {key!r} must be a string, got {type(value).__name__}"
            )

    # --- Properties ---

    @property
    def is_changed(self) -> bool:
        return self._changed

    @is_changed.setter
    def is_changed(self, value: bool) -> None:
        self._changed = value

    @property
    def empty(self) -> bool:
        return not bool(self._data)

    # --- Reconciliation ---

    def missing(self, definitions: Iterable[SecretDefinition]) -> list[SecretDefinition]:
        """Definitions whose key is absent from this set."""
        return [d for d in definitions if d.key not in self._data]

    def reconcile(self, definitions: Iterable[SecretDefinition]) -> list[str]:
        """Fill every absent key by running its generator.

        Keys already present are never overwritten.

        Returns:
            The keys that were added, in definition order.
        """
        added = []
        for definition in self.missing(definitions):
            self[definition.key] = definition.generator()
            added.append(definition.key)
        return added

    def to_dict(self) -> dict[str, str]:
        return dict(self._data)

    # --- Serialization ---

    def encode(self) -> bytes:
        """Serialize the set to JSON bytes."""
        return orjson.dumps(self._data)

    @classmethod
    def decode(cls, payload: bytes) -> "SecretSet":
        """decode.

            Build a SecretSet from decrypted vault bytes.
        Args:
            payload (bytes): JSON object of string keys and string values.

        Raises:
            BadPasswordOrCorruptData: payload is not such an object.

        Returns:
            SecretSet: the loaded secrets, marked unchanged.
        """
        try:
            parsed = orjson.loads(payload)
        except orjson.JSONDecodeError as err:
            raise BadPasswordOrCorruptData(
                "Decrypted vault is not valid JSON"
            ) from err
        if not isinstance(parsed, dict):
            raise BadPasswordOrCorruptData("Decrypted vault is not an object")
        try:
            return cls(data=parsed)
        except (TypeError, ValueError) as err:
            raise BadPasswordOrCorruptData(
                "Decrypted vault holds non-string entries"
            ) from err

    # --- Magic Methods ---

    def __len__(self) -> int:
        return len(self._data)

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def __getitem__(self, key: str) -> str:
        return self._data[key]

    def __setitem__(self, key: str, value: str) -> None:
        self._validate(key, value)
        if key not in self._data or self._data[key] != value:
            self._data[key] = value
            self._changed = True

    def __delitem__(self, key: str) -> None:
        del self._data[key]
        self._changed = True
