"""Unit tests for injection markers."""

from typing import Annotated, get_args

from reflectinject.domain.markers import (
    CONSTRUCTOR_ATTRIBUTE,
    INJECT_ATTRIBUTE,
    Inject,
    constructor,
    inject,
    is_inject_marker,
    is_marked_constructor,
)


class TestInjectMarker:
    """Test cases for the field marker."""

    def test_marker_class_and_instance_are_recognised(self):
        """Test that both Inject and Inject() count as the marker."""
        assert is_inject_marker(Inject)
        assert is_inject_marker(Inject())

    def test_other_metadata_is_not_a_marker(self):
        """Test that unrelated Annotated metadata is ignored."""
        assert not is_inject_marker("inject")
        assert not is_inject_marker(None)

    def test_marker_usable_in_annotated(self):
        """Test that the marker can be placed in Annotated metadata."""

        class Repository:
            pass

        hint = Annotated[Repository, Inject]

        assert get_args(hint) == (Repository, Inject)

    def test_repr(self):
        """Test the marker representation."""
        assert repr(Inject()) == "Inject"


class TestInjectDecorator:
    """Test cases for the @inject method decorator."""

    def test_decorator_marks_and_returns_function(self):
        """Test that @inject sets the marker and keeps the function."""

        def set_repository(self, repository):
            pass

        decorated = inject(set_repository)

        assert decorated is set_repository
        assert getattr(decorated, INJECT_ATTRIBUTE) is True


class TestConstructorDecorator:
    """Test cases for the @constructor decorator."""

    def test_decorator_returns_marked_classmethod(self):
        """Test that @constructor produces a marked classmethod."""

        class Connection:
            def __init__(self, url):
                self.url = url

            @constructor
            def from_defaults(cls):
                return cls("sqlite://")

        attribute = vars(Connection)["from_defaults"]

        assert isinstance(attribute, classmethod)
        assert getattr(attribute.__func__, CONSTRUCTOR_ATTRIBUTE) is True
        assert is_marked_constructor(attribute)
        assert Connection.from_defaults().url == "sqlite://"

    def test_plain_classmethod_is_not_marked(self):
        """Test that an ordinary classmethod is not an alternative constructor."""

        class Connection:
            @classmethod
            def create(cls):
                return cls()

        assert not is_marked_constructor(vars(Connection)["create"])
        assert not is_marked_constructor(lambda: None)
