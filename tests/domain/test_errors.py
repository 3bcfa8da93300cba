"""Tests for the error taxonomy."""

from envfill.domain.errors import (
    CoercionError,
    DuplicateKeyError,
    EnvLoadError,
    MalformedContainerSyntaxError,
    UnsupportedShapeError,
)


class TestHierarchy:
    def test_all_derive_from_base(self) -> None:
        for cls in (CoercionError, DuplicateKeyError, UnsupportedShapeError):
            assert issubclass(cls, EnvLoadError)

    def test_malformed_is_a_coercion_error(self) -> None:
        assert issubclass(MalformedContainerSyntaxError, CoercionError)

    def test_codes_are_distinct(self) -> None:
        codes = {
            cls.code
            for cls in (
                EnvLoadError,
                CoercionError,
                MalformedContainerSyntaxError,
                DuplicateKeyError,
                UnsupportedShapeError,
            )
        }
        assert len(codes) == 5


class TestMessages:
    def test_coercion_message_and_detail(self) -> None:
        err = CoercionError("b", "PFX_B", "notanumber", "int", "'notanumber' is not an integer")
        assert "PFX_B='notanumber'" in str(err)
        assert "field 'b'" in str(err)
        assert err.detail() == {
            "field": "b",
            "env_key": "PFX_B",
            "raw_value": "notanumber",
            "expected_kind": "int",
            "reason": "'notanumber' is not an integer",
        }

    def test_duplicate_key_detail(self) -> None:
        err = DuplicateKeyError("m", "PFX_M", 1)
        assert "duplicate key 1" in str(err)
        assert err.detail()["key"] == "1"

    def test_unsupported_shape(self) -> None:
        err = UnsupportedShapeError("Model.blob", "cannot classify bytes")
        assert str(err) == "Unsupported shape for Model.blob: cannot classify bytes"
        assert err.detail() == {"target": "Model.blob", "reason": "cannot classify bytes"}
