"""
Tests for SecretSet and SecretDefinition.

Tests cover:
- Mapping behaviour and value validation
- Change tracking
- Reconciliation against definitions (fill absent keys, never overwrite)
- JSON encode/decode and classification of undecodable payloads
"""
import pytest
from pydantic import ValidationError

from navigator_launcher.data import (
    SecretDefinition,
    SecretSet,
    validate_definitions,
)
from navigator_launcher.exceptions import BadPasswordOrCorruptData


# --- Test Fixtures ---

class CountingGenerator:
    """Generator that remembers how often it ran."""
    def __init__(self, value: str = "generated"):
        self.value = value
        self.calls = 0

    def __call__(self) -> str:
        self.calls += 1
        return self.value


@pytest.fixture
def secrets():
    """Create an empty SecretSet."""
    return SecretSet()


@pytest.fixture
def secrets_with_data():
    """Create a SecretSet with initial data."""
    return SecretSet(data={
        'API_KEY': 'abc',
        'DATABASE_KEY': 'def',
    })


# --- Test Initialization ---

class TestSecretSetInitialization:
    """Tests for SecretSet initialization."""

    def test_empty_set(self, secrets):
        """Test creating an empty set."""
        assert secrets.empty is True
        assert len(secrets) == 0
        assert secrets.is_changed is False

    def test_set_with_initial_data(self, secrets_with_data):
        """Test loaded data is readable and unchanged."""
        assert secrets_with_data['API_KEY'] == 'abc'
        assert secrets_with_data.is_changed is False
        assert secrets_with_data.empty is False

    def test_new_set_is_changed(self):
        """Test a new set counts as changed until it is saved."""
        assert SecretSet(new=True).is_changed is True

    def test_initial_data_is_validated(self):
        """Test non-string values are refused at construction."""
        with pytest.raises(TypeError):
            SecretSet(data={'PORT': 3000})


# --- Test Magic Methods ---

class TestMagicMethods:
    """Tests for dict-like magic methods."""

    def test_setitem_marks_changed(self, secrets):
        """Test __setitem__ stores value and flags the change."""
        secrets['TOKEN'] = 'value'
        assert secrets['TOKEN'] == 'value'
        assert secrets.is_changed is True

    def test_setitem_same_value_is_not_a_change(self, secrets_with_data):
        """Test writing an identical value leaves the set unchanged."""
        secrets_with_data['API_KEY'] = 'abc'
        assert secrets_with_data.is_changed is False

    def test_setitem_rejects_empty_key(self, secrets):
        """Test empty keys are refused."""
        with pytest.raises(ValueError):
            secrets[''] = 'value'

    def test_setitem_rejects_non_string_value(self, secrets):
        """Test non-string values are refused."""
        with pytest.raises(TypeError):
            secrets['TOKEN'] = b'bytes'

    def test_getitem_keyerror(self, secrets):
        """Test __getitem__ raises KeyError for missing keys."""
        with pytest.raises(KeyError):
            _ = secrets['missing']

    def test_delitem(self, secrets_with_data):
        """Test __delitem__ removes the key and flags the change."""
        del secrets_with_data['API_KEY']
        assert 'API_KEY' not in secrets_with_data
        assert secrets_with_data.is_changed is True

    def test_len_iter_contains(self, secrets_with_data):
        """Test mapping protocol."""
        assert len(secrets_with_data) == 2
        assert set(secrets_with_data) == {'API_KEY', 'DATABASE_KEY'}
        assert 'API_KEY' in secrets_with_data
        assert 'OTHER' not in secrets_with_data

    def test_get_method(self, secrets_with_data):
        """Test inherited get() with default."""
        assert secrets_with_data.get('API_KEY') == 'abc'
        assert secrets_with_data.get('OTHER', 'x') == 'x'

    def test_repr_hides_values(self, secrets_with_data):
        """Test repr lists keys but never values."""
        repr_str = repr(secrets_with_data)
        assert 'API_KEY' in repr_str
        assert 'abc' not in repr_str


# --- Test Definitions ---

class TestSecretDefinition:
    """Tests for SecretDefinition validation."""

    def test_definition(self):
        """Test a definition keeps its key and generator."""
        definition = SecretDefinition(key='API_KEY', generator=lambda: 'abc')
        assert definition.key == 'API_KEY'
        assert definition.generator() == 'abc'

    def test_empty_key_rejected(self):
        """Test empty keys are refused."""
        with pytest.raises(ValidationError):
            SecretDefinition(key='', generator=lambda: 'abc')

    def test_generator_must_be_callable(self):
        """Test generators must be callables."""
        with pytest.raises(ValidationError):
            SecretDefinition(key='API_KEY', generator='abc')

    def test_definition_is_frozen(self):
        """Test definitions are immutable."""
        definition = SecretDefinition(key='API_KEY', generator=lambda: 'abc')
        with pytest.raises(ValidationError):
            definition.key = 'OTHER'

    def test_duplicate_keys_rejected(self):
        """Test duplicated keys are refused."""
        definitions = [
            SecretDefinition(key='API_KEY', generator=lambda: 'a'),
            SecretDefinition(key='API_KEY', generator=lambda: 'b'),
        ]
        with pytest.raises(ValueError):
            validate_definitions(definitions)


# --- Test Reconciliation ---

class TestReconcile:
    """Tests for filling missing secrets."""

    def test_fills_absent_keys(self, secrets):
        """Test generators run for absent keys."""
        generator = CountingGenerator('abc')
        added = secrets.reconcile([
            SecretDefinition(key='API_KEY', generator=generator)
        ])
        assert added == ['API_KEY']
        assert secrets['API_KEY'] == 'abc'
        assert generator.calls == 1
        assert secrets.is_changed is True

    def test_never_overwrites_present_keys(self, secrets_with_data):
        """Test present keys keep their value and their generator never runs."""
        generator = CountingGenerator('new')
        added = secrets_with_data.reconcile([
            SecretDefinition(key='API_KEY', generator=generator)
        ])
        assert added == []
        assert secrets_with_data['API_KEY'] == 'abc'
        assert generator.calls == 0
        assert secrets_with_data.is_changed is False

    def test_empty_value_counts_as_present(self):
        """Test an empty-string value is kept, not regenerated."""
        secrets = SecretSet(data={'API_KEY': ''})
        generator = CountingGenerator()
        secrets.reconcile([SecretDefinition(key='API_KEY', generator=generator)])
        assert secrets['API_KEY'] == ''
        assert generator.calls == 0

    def test_generator_must_return_string(self, secrets):
        """Test a generator returning a non-string fails."""
        with pytest.raises(TypeError):
            secrets.reconcile([
                SecretDefinition(key='PORT', generator=lambda: 3000)
            ])

    def test_missing(self, secrets_with_data):
        """Test missing() lists only absent definitions."""
        definitions = [
            SecretDefinition(key='API_KEY', generator=lambda: 'a'),
            SecretDefinition(key='NEW_KEY', generator=lambda: 'b'),
        ]
        missing = secrets_with_data.missing(definitions)
        assert [d.key for d in missing] == ['NEW_KEY']


# --- Test Encode / Decode ---

class TestEncodeDecode:
    """Tests for JSON serialization of the set."""

    def test_encode_is_json_object(self, secrets_with_data):
        """Test encode produces a JSON object."""
        encoded = secrets_with_data.encode()
        assert isinstance(encoded, bytes)
        assert encoded.startswith(b'{')
        assert b'"API_KEY":"abc"' in encoded

    def test_decode(self):
        """Test decode builds an unchanged set."""
        secrets = SecretSet.decode(b'{"API_KEY":"abc"}')
        assert secrets.to_dict() == {'API_KEY': 'abc'}
        assert secrets.is_changed is False

    @pytest.mark.parametrize('payload', [
        b'\x8f\x01garbage',
        b'[1, 2, 3]',
        b'{"PORT": 3000}',
    ])
    def test_decode_garbage_is_bad_password(self, payload):
        """Test undecodable payloads are reported as bad password or corruption."""
        with pytest.raises(BadPasswordOrCorruptData):
            SecretSet.decode(payload)
