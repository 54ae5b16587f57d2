"""Unit tests for domain enums."""

import pytest

from reflectinject.domain.enums import Lifecycle


class TestLifecycleEnum:
    """Test cases for the Lifecycle enum."""

    def test_singleton_value(self):
        """Test that SINGLETON has correct string value."""
        assert Lifecycle.SINGLETON.value == "singleton"

    def test_transient_value(self):
        """Test that TRANSIENT has correct string value."""
        assert Lifecycle.TRANSIENT.value == "transient"

    def test_lifecycle_from_value(self):
        """Test that lifecycle can be created from string value."""
        assert Lifecycle("singleton") == Lifecycle.SINGLETON
        assert Lifecycle("transient") == Lifecycle.TRANSIENT

    def test_invalid_lifecycle_value_raises_error(self):
        """Test that invalid lifecycle value raises ValueError."""
        with pytest.raises(ValueError, match="'scoped' is not a valid Lifecycle"):
            Lifecycle("scoped")

    def test_lifecycle_enum_members(self):
        """Test that exactly two lifecycles exist."""
        assert set(Lifecycle) == {Lifecycle.SINGLETON, Lifecycle.TRANSIENT}

    def test_lifecycle_string_representation(self):
        """Test that str() returns the value."""
        assert str(Lifecycle.SINGLETON) == "singleton"
        assert str(Lifecycle.TRANSIENT) == "transient"

    def test_lifecycle_is_string_subclass(self):
        """Test that lifecycles compare equal to their string values."""
        assert Lifecycle.SINGLETON == "singleton"
        assert isinstance(Lifecycle.TRANSIENT, str)
