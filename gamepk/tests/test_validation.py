"""
Tests for build request validation.
"""

import pytest

from ..errors import ValidationError, ValidationErrorKind
from ..validation import is_valid_package_name, validate_build_request


class TestPackageNameGrammar:

    @pytest.mark.parametrize("name", ["com.example.game", "com.my_app.v2", "io.x", "org.a1.b_2.c"])
    def test_accepts_reverse_domain_names(self, name):
        assert is_valid_package_name(name)

    @pytest.mark.parametrize(
        "name",
        ["Example.Game", "com", "com..game", "1com.example", "com.example.", ".com.example",
         "com.Example", "com.1game", "com.ex-ample", "com.example game", "Invalid"],
    )
    def test_rejects_everything_else(self, name):
        assert not is_valid_package_name(name)


class TestValidateBuildRequest:

    def test_valid_request(self, build_data):
        request = validate_build_request(build_data)
        assert request.game_code == "ctx.fillRect(0,0,10,10);"
        assert request.app_name == "Demo"
        assert request.package_name == "com.demo.app"
        assert request.project_name == "com-demo-app"

    @pytest.mark.parametrize("field", ["gameCode", "appName", "packageName"])
    def test_missing_field(self, build_data, field):
        del build_data[field]
        with pytest.raises(ValidationError) as exc_info:
            validate_build_request(build_data)
        assert exc_info.value.kind == ValidationErrorKind.MISSING_FIELD
        assert exc_info.value.field == field

    @pytest.mark.parametrize("value", ["", "   ", None, 42])
    def test_blank_or_non_string_counts_as_missing(self, build_data, value):
        build_data["appName"] = value
        with pytest.raises(ValidationError) as exc_info:
            validate_build_request(build_data)
        assert exc_info.value.kind == ValidationErrorKind.MISSING_FIELD

    def test_invalid_package_name_explains_grammar(self, build_data):
        build_data["packageName"] = "Invalid"
        with pytest.raises(ValidationError) as exc_info:
            validate_build_request(build_data)
        error = exc_info.value
        assert error.kind == ValidationErrorKind.INVALID_PACKAGE_NAME
        assert "lowercase" in error.message
        assert "two" in error.message
        assert error.to_dict()["kind"] == "InvalidPackageName"

    @pytest.mark.parametrize("app_name", ["-h", "--web-dir", "  --help"])
    def test_option_like_app_name_rejected(self, build_data, app_name):
        build_data["appName"] = app_name
        with pytest.raises(ValidationError) as exc_info:
            validate_build_request(build_data)
        assert exc_info.value.kind == ValidationErrorKind.INVALID_APP_NAME
        assert exc_info.value.field == "appName"

    def test_hyphen_inside_app_name_allowed(self, build_data):
        build_data["appName"] = "Space-Invaders - Deluxe"
        assert validate_build_request(build_data).app_name == "Space-Invaders - Deluxe"

    def test_shell_metacharacters_rejected(self, build_data):
        build_data["packageName"] = "com.demo;rm -rf /"
        with pytest.raises(ValidationError):
            validate_build_request(build_data)

    def test_identifiers_are_stripped_but_game_code_is_not(self, build_data):
        build_data["appName"] = "  Demo  "
        build_data["gameCode"] = "\n  draw();\n"
        request = validate_build_request(build_data)
        assert request.app_name == "Demo"
        assert request.game_code == "\n  draw();\n"
