import pytest

from ..core.errors import ConfigurationError
from .properties import (
    parse_properties,
    parse_pubspec_version,
    read_properties,
    read_pubspec_version,
)


def test_parse_properties_separators_and_comments():
    text = (
        "# generated by Flutter\n"
        "! another comment\n"
        "sdk.dir=/opt/android-sdk\n"
        "flutter.sdk : /opt/flutter\n"
        "flutter.buildMode release\n"
        "\n"
        "flutter.versionCode=12\n"
    )
    assert parse_properties(text) == {
        "sdk.dir": "/opt/android-sdk",
        "flutter.sdk": "/opt/flutter",
        "flutter.buildMode": "release",
        "flutter.versionCode": "12",
    }


def test_parse_properties_windows_path_escapes():
    assert parse_properties(r"sdk.dir=C\:\\Users\\dev\\AppData\\Local\\Android\\sdk") == {
        "sdk.dir": r"C:\Users\dev\AppData\Local\Android\sdk"
    }


def test_parse_properties_line_continuation():
    text = "flutter.versionName=1.0.\\\n    2\nother=x\n"
    assert parse_properties(text) == {"flutter.versionName": "1.0.2", "other": "x"}


def test_parse_properties_unicode_escape_and_empty_value():
    assert parse_properties("name=caf\\u00e9\nempty=\nflag") == {
        "name": "café",
        "empty": "",
        "flag": "",
    }


def test_parse_properties_escaped_separator_in_key():
    assert parse_properties(r"key\=with\:chars=value") == {"key=with:chars": "value"}


def test_read_properties_falls_back_to_latin1(tmp_path):
    path = tmp_path / "local.properties"
    path.write_bytes("flutter.versionName=caf\xe9\n".encode("latin-1"))
    assert read_properties(path) == {"flutter.versionName": "café"}


def test_read_properties_missing_file(tmp_path):
    with pytest.raises(ConfigurationError):
        read_properties(tmp_path / "local.properties")


@pytest.mark.parametrize(
    "version, expected",
    [
        ("1.2.3+4", ("1.2.3", 4)),
        ("1.0.0", ("1.0.0", None)),
        (" 2.0.0-beta+17 ", ("2.0.0-beta", 17)),
    ],
)
def test_parse_pubspec_version(version, expected):
    assert parse_pubspec_version(version) == expected


@pytest.mark.parametrize("version", ["+4", "1.0.0+abc"])
def test_parse_pubspec_version_invalid(version):
    with pytest.raises(ValueError):
        parse_pubspec_version(version)


def test_read_pubspec_version(tmp_path):
    path = tmp_path / "pubspec.yaml"
    path.write_text("name: app\nversion: 1.4.0+9\nenvironment:\n  sdk: '>=3.0.0 <4.0.0'\n", encoding="utf-8")
    assert read_pubspec_version(path) == ("1.4.0", 9)


def test_read_pubspec_without_version(tmp_path):
    path = tmp_path / "pubspec.yaml"
    path.write_text("name: app\n", encoding="utf-8")
    assert read_pubspec_version(path) is None


def test_read_pubspec_invalid_version(tmp_path):
    path = tmp_path / "pubspec.yaml"
    path.write_text("version: 1.0.0+next\n", encoding="utf-8")
    with pytest.raises(ConfigurationError) as exc_info:
        read_pubspec_version(path)
    assert exc_info.value.context.field == "version"
