"""Unit tests for classes declared with postponed annotations."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Annotated

from reflectinject.application.introspector import ReflectionIntrospector
from reflectinject.application.registry import Registry
from reflectinject.domain import Inject, inject

if TYPE_CHECKING:
    from logging import Logger

INTROSPECTOR_LOGGER = "reflectinject.application.introspector"


class Repository:
    pass


class ReportTarget:
    repository: Annotated[Repository, Inject] = None
    audit: Logger = None


class ReportService:
    def __init__(self, repository: Repository, audit: Logger = None):
        self.repository = repository
        self.audit = audit


class AuditedService:
    def __init__(self, repository: Repository, audit: Logger):
        self.repository = repository
        self.audit = audit


class SetterTarget:
    def __init__(self):
        self.repository = None

    @inject
    def set_repository(self, repository: Repository) -> None:
        self.repository = repository

    @inject
    def set_audit(self, audit: Logger) -> None:
        self.audit = audit


class TestPostponedFieldAnnotations:
    """Test cases for fields whose hints are strings."""

    def test_marked_field_is_recognised(self):
        """Test that string hints are evaluated against the declaring module."""
        fields = {field.name: field for field in ReflectionIntrospector().fields(ReportTarget)}

        assert fields["repository"].marked
        assert fields["repository"].annotation is Repository

    def test_unresolvable_field_does_not_hide_other_fields(self, caplog):
        """Test that a type-checking-only name only affects its own field."""
        target = ReportTarget()

        with caplog.at_level(logging.WARNING, logger=INTROSPECTOR_LOGGER):
            Registry(__name__).inject_into_properties(target)

        assert isinstance(target.repository, Repository)
        assert target.audit is None
        assert "audit type hint" in caplog.text


class TestPostponedParameterAnnotations:
    """Test cases for parameters whose hints are strings."""

    def test_defaulted_unresolvable_parameter_is_ignored(self, caplog):
        """Test that a defaulted parameter is skipped before its hint is evaluated."""
        registry = Registry(__name__)

        with caplog.at_level(logging.WARNING, logger=INTROSPECTOR_LOGGER):
            assert registry.is_eligible(ReportService)
            service = registry.resolve(ReportService)

        assert isinstance(service.repository, Repository)
        assert service.audit is None
        assert "name error" not in caplog.text

    def test_required_unresolvable_parameter_is_not_eligible(self):
        """Test that a required parameter with an unknown name stays ineligible."""
        parameters = ReflectionIntrospector().parameters(AuditedService.__init__)

        assert [parameter.annotation for parameter in parameters] == [Repository, "Logger"]
        assert not Registry(__name__).is_eligible(AuditedService)

    def test_setters_are_judged_one_by_one(self):
        """Test that an unresolvable setter does not block the others."""
        target = SetterTarget()

        Registry(__name__).inject_into_setters(target)

        assert isinstance(target.repository, Repository)
        assert not hasattr(target, "audit")
