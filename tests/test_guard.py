"""
Tests for the runtime guard.
"""

from datetime import date

import pytest

from deadlock import DeadlockConfig, DeadlockGuard, MarkerValidationError, WorkaroundExpiredError, workaround
from deadlock.guard import class_location, resolve_class
from deadlock.markers import get_markers

import sample_services
from sample_services import ActiveService, ChildOfExpired, CleanService, ExpiredService


@pytest.fixture
def guard(local_config):
    return DeadlockGuard(local_config)


class TestEnvironmentGate:
    """The guard only fires in local environments."""

    def test_production_is_noop(self, production_config):
        DeadlockGuard(production_config).check(ExpiredService)

    def test_default_config_is_noop(self):
        DeadlockGuard().check(ExpiredService)

    def test_custom_local_environments(self):
        cfg = DeadlockConfig(environment="dev", local_environments=("local", "dev"))
        with pytest.raises(WorkaroundExpiredError):
            DeadlockGuard(cfg).check(ExpiredService)


class TestClassMarkers:
    """Markers attached to the class itself."""

    def test_expired_class_raises(self, guard):
        with pytest.raises(WorkaroundExpiredError) as exc:
            guard.check(ExpiredService)
        err = exc.value
        assert err.description == "Expired class workaround"
        assert err.expires == "2020-01-01"
        assert err.location == "sample_services.ExpiredService"
        assert str(err) == (
            'Expired workaround detected: "Expired class workaround" '
            "(expired on 2020-01-01) at sample_services.ExpiredService"
        )

    def test_instance_target(self, guard):
        with pytest.raises(WorkaroundExpiredError):
            guard.check(ExpiredService())

    def test_string_target(self, guard):
        with pytest.raises(WorkaroundExpiredError):
            guard.check("sample_services.ExpiredService")
        with pytest.raises(WorkaroundExpiredError):
            guard.check("sample_services:ExpiredService")

    def test_unresolvable_string_is_noop(self, guard):
        guard.check("no_such_module.Missing")
        guard.check("sample_services.Missing")
        guard.check("Missing")

    def test_active_class_passes(self, guard):
        guard.check(CleanService)

    def test_inherited_markers_not_applied(self, guard):
        guard.check(ChildOfExpired)

    def test_expires_today_passes(self, local_config):
        @workaround("due today", "2025-01-15")
        class DueToday:
            pass

        DeadlockGuard(local_config, today=lambda: date(2025, 1, 15)).check(DueToday)
        with pytest.raises(WorkaroundExpiredError):
            DeadlockGuard(local_config, today=lambda: date(2025, 1, 16)).check(DueToday)


class TestMethodMarkers:
    """Markers attached to a method."""

    def test_expired_method_raises(self, guard):
        with pytest.raises(WorkaroundExpiredError) as exc:
            guard.check(ActiveService, "run")
        assert exc.value.location == "sample_services.ActiveService::run"

    def test_method_not_checked_without_name(self, guard):
        guard.check(ActiveService)

    def test_active_method_passes(self, guard):
        guard.check(ActiveService, "stable")
        guard.check(ActiveService, "plain")

    def test_missing_method_ignored(self, guard):
        guard.check(ActiveService, "does_not_exist")

    def test_staticmethod_unwrapped(self, guard):
        with pytest.raises(WorkaroundExpiredError) as exc:
            guard.check(CleanService, "helper")
        assert exc.value.location.endswith("CleanService::helper")

    def test_class_checked_before_method(self, guard):
        with pytest.raises(WorkaroundExpiredError) as exc:
            guard.check(ExpiredService, "run")
        assert exc.value.location == "sample_services.ExpiredService"


class TestValidation:
    """Live markers go through the same strict decoder."""

    def test_invalid_calendar_date(self, guard):
        @workaround("bad", "2025-02-30")
        class Bad:
            pass

        with pytest.raises(MarkerValidationError, match="Invalid expires date '2025-02-30'."):
            guard.check(Bad)

    def test_non_string_expires(self, guard):
        @workaround("bad", 20250101)
        class Bad:
            pass

        with pytest.raises(MarkerValidationError, match="expires must be a string literal"):
            guard.check(Bad)


class TestActions:
    """Route-action style entry points."""

    def test_check_action(self, guard):
        with pytest.raises(WorkaroundExpiredError):
            guard.check_action("sample_services.ActiveService@run")

    def test_check_action_without_method_separator(self, guard):
        guard.check_action("sample_services.ExpiredService")

    def test_check_callable_bound_method(self, guard):
        with pytest.raises(WorkaroundExpiredError):
            guard.check_callable(ActiveService().run)
        guard.check_callable(ActiveService().stable)

    def test_check_callable_plain_function(self, guard):
        guard.check_callable(len)
        guard.check_callable(lambda: None)

    def test_enforce(self, guard):
        class Handler:
            @guard.enforce
            @workaround("expired handler", "2020-01-01")
            def handle(self):
                return "handled"

            @guard.enforce
            def ok(self):
                return "ok"

        handler = Handler()
        assert handler.ok() == "ok"
        with pytest.raises(WorkaroundExpiredError):
            handler.handle()

    def test_enforce_disabled_outside_local(self, production_config):
        guard = DeadlockGuard(production_config)

        class Handler:
            @guard.enforce
            @workaround("expired handler", "2020-01-01")
            def handle(self):
                return "handled"

        assert Handler().handle() == "handled"


class TestHelpers:

    def test_resolve_class(self):
        assert resolve_class(ExpiredService) is ExpiredService
        assert resolve_class(ExpiredService()) is ExpiredService
        assert resolve_class("sample_services.ExpiredService") is ExpiredService
        assert resolve_class("sample_services.deadlock") is None

    def test_class_location(self):
        assert class_location(ExpiredService) == "sample_services.ExpiredService"

    def test_markers_keep_source_order(self):
        @workaround("first", "2099-01-01")
        @workaround("second", "2099-01-01")
        class Twice:
            pass

        assert [m.description for m in get_markers(Twice)] == ["first", "second"]

    def test_module_has_no_markers(self):
        assert get_markers(sample_services) == ()


class TestWrappedMethods:
    """Markers above property/staticmethod/classmethod wrappers."""

    def test_marker_above_property(self, guard):
        class Svc:
            @workaround("expired prop", "2020-01-01")
            @property
            def value(self):
                return 1

        assert Svc().value == 1
        with pytest.raises(WorkaroundExpiredError) as exc:
            guard.check(Svc, "value")
        assert exc.value.location.endswith("Svc::value")

    def test_marker_below_property(self, guard):
        class Svc:
            @property
            @workaround("expired prop", "2020-01-01")
            def value(self):
                return 1

        with pytest.raises(WorkaroundExpiredError):
            guard.check(Svc, "value")

    def test_marker_above_staticmethod(self, guard):
        class Svc:
            @workaround("expired static", "2020-01-01")
            @staticmethod
            def helper():
                return "helper"

        assert Svc.helper() == "helper"
        with pytest.raises(WorkaroundExpiredError) as exc:
            guard.check(Svc, "helper")
        assert exc.value.description == "expired static"

    def test_marker_above_classmethod(self, guard):
        class Svc:
            @workaround("expired class method", "2020-01-01")
            @classmethod
            def build(cls):
                return cls

        assert Svc.build() is Svc
        with pytest.raises(WorkaroundExpiredError):
            guard.check(Svc, "build")

    def test_markers_both_sides_of_wrapper_keep_order(self):
        def helper():
            return None

        wrapped = workaround("outer", "2099-01-01")(
            staticmethod(workaround("inner", "2099-01-01")(helper))
        )
        assert isinstance(wrapped, staticmethod)
        assert [m.description for m in get_markers(helper)] == ["outer", "inner"]

    def test_active_marker_above_property_passes(self, guard):
        class Svc:
            @workaround("active prop", "2099-01-01")
            @property
            def value(self):
                return 1

        guard.check(Svc, "value")
