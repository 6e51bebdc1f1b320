import pytest

from ..utils.config import ConfigLoader
from .errors import ResolutionError
from .models import BuildConfiguration, PropertyReference
from .resolver import (
    DEFAULT_FLUTTER_PROPERTIES,
    ConfigurationResolver,
    FlutterProperties,
    resolve_configuration,
)


@pytest.fixture
def unresolved_record():
    return BuildConfiguration(
        compile_sdk="flutter.compileSdkVersion",
        min_sdk=21,
        target_sdk="flutter.targetSdkVersion",
        version_code="flutter.versionCode",
        version_name="flutter.versionName",
    )


def test_defaults_resolve_every_flutter_reference(unresolved_record):
    resolved = ConfigurationResolver().resolve(unresolved_record)
    assert resolved.is_resolved
    assert resolved.compile_sdk == int(DEFAULT_FLUTTER_PROPERTIES["flutter.compileSdkVersion"])
    assert resolved.target_sdk == int(DEFAULT_FLUTTER_PROPERTIES["flutter.targetSdkVersion"])
    assert resolved.version_code == 1
    assert resolved.version_name == "1.0"
    assert resolved.min_sdk == 21


def test_resolve_leaves_input_untouched(unresolved_record):
    ConfigurationResolver().resolve(unresolved_record)
    assert isinstance(unresolved_record.compile_sdk, PropertyReference)


def test_resolve_without_references_returns_same_record():
    record = BuildConfiguration(min_sdk=21)
    assert ConfigurationResolver().resolve(record) is record


def test_overrides_win_over_defaults(unresolved_record):
    properties = FlutterProperties().with_overrides({"flutter.versionCode": "7"})
    resolved = ConfigurationResolver(properties).resolve(unresolved_record)
    assert resolved.version_code == 7
    assert properties.sources == ["defaults", "overrides"]


def test_unknown_reference_raises():
    record = BuildConfiguration(min_sdk="flutter.minimumSdk")
    with pytest.raises(ResolutionError) as exc_info:
        ConfigurationResolver().resolve(record)
    assert exc_info.value.reference == "flutter.minimumSdk"
    assert exc_info.value.context.field == "min_sdk"


def test_non_integer_value_for_integer_field_raises(unresolved_record):
    properties = FlutterProperties().with_overrides({"flutter.versionCode": "one"})
    with pytest.raises(ResolutionError, match="must be an integer"):
        ConfigurationResolver(properties).resolve(unresolved_record)


def test_discover_without_location_uses_defaults():
    properties = FlutterProperties.discover()
    assert properties.values == DEFAULT_FLUTTER_PROPERTIES
    assert properties.sources == ["defaults"]


def test_discover_from_project_directory(flutter_project):
    properties = FlutterProperties.discover(flutter_project)
    assert properties.get("flutter.versionName") == "2.3.0"
    assert properties.get("flutter.versionCode") == "42"
    assert properties.get("flutter.minSdkVersion") == "23"
    assert properties.get("flutter.sdk") == "/opt/flutter"
    assert len(properties.sources) == 3


def test_local_properties_win_over_pubspec(flutter_project):
    (flutter_project / "android" / "local.properties").write_text(
        "flutter.versionCode=99\n", encoding="utf-8"
    )
    properties = FlutterProperties.discover(flutter_project)
    assert properties.get("flutter.versionCode") == "99"
    assert properties.get("flutter.versionName") == "2.3.0"


def test_discover_from_record_follows_flutter_source(flutter_project):
    record = BuildConfiguration(
        version_code="flutter.versionCode",
        flutter_source="../..",
        source_file=flutter_project / "android" / "app" / "build.gradle.kts",
    )
    resolved = resolve_configuration(record)
    assert resolved.version_code == 42


def test_resolve_configuration_with_overrides(flutter_project):
    record = BuildConfiguration(
        min_sdk="flutter.minSdkVersion",
        source_file=flutter_project / "android" / "app" / "build.gradle.kts",
    )
    assert resolve_configuration(record).min_sdk == 23
    assert resolve_configuration(record, {"flutter.minSdkVersion": "26"}).min_sdk == 26


def test_pubspec_without_build_number_keeps_default_code(tmp_path):
    (tmp_path / "pubspec.yaml").write_text("name: app\nversion: 3.1.0\n", encoding="utf-8")
    properties = FlutterProperties.discover(tmp_path)
    assert properties.get("flutter.versionName") == "3.1.0"
    assert properties.get("flutter.versionCode") == "1"


def test_discover_from_data_file_uses_its_directory(flutter_project):
    config = flutter_project / "gradle_config.json"
    config.write_text(
        '{"version_code": "flutter.versionCode", "min_sdk": "flutter.minSdkVersion"}',
        encoding="utf-8",
    )
    resolved = resolve_configuration(ConfigLoader.load_from_file(config))
    assert resolved.version_code == 42
    assert resolved.min_sdk == 23
