import pytest
from pathlib import Path

from pydantic import ValidationError

from .enums import GradleDsl, OutputFormat, Severity, SigningConfigRef
from .errors import ConfigurationError
from .models import (
    BuildConfiguration,
    BuildType,
    Dependency,
    PropertyReference,
    java_version_string,
)


# --- PropertyReference ---


def test_property_reference_parts():
    reference = PropertyReference(expression="flutter.versionCode")
    assert reference.namespace == "flutter"
    assert reference.property_name == "versionCode"
    assert str(reference) == "flutter.versionCode"


def test_property_reference_without_namespace():
    reference = PropertyReference(expression="flutterVersionName")
    assert reference.namespace is None
    assert reference.property_name == "flutterVersionName"


# --- Dependency ---


@pytest.mark.parametrize(
    "notation, group, name, version",
    [
        ("com.android.tools:desugar_jdk_libs:2.1.4", "com.android.tools", "desugar_jdk_libs", "2.1.4"),
        ("androidx.multidex:multidex", "androidx.multidex", "multidex", None),
        (" androidx.core:core-ktx:1.13.1 ", "androidx.core", "core-ktx", "1.13.1"),
    ],
)
def test_dependency_from_coordinate(notation, group, name, version):
    dependency = Dependency.from_coordinate("implementation", notation)
    assert dependency.group == group
    assert dependency.name == name
    assert dependency.version == version
    assert dependency.coordinate == f"{group}:{name}"


@pytest.mark.parametrize("notation", ["desugar_jdk_libs", "a:b:c:d", ":name:1.0", "group with space:name"])
def test_dependency_from_invalid_coordinate(notation):
    with pytest.raises(ConfigurationError) as exc_info:
        Dependency.from_coordinate("implementation", notation)
    assert exc_info.value.context.field == "implementation"


def test_dependency_notation_round_trip():
    dependency = Dependency.from_coordinate("coreLibraryDesugaring", "com.android.tools:desugar_jdk_libs:2.1.4")
    assert dependency.notation == "com.android.tools:desugar_jdk_libs:2.1.4"
    assert dependency.matches("com.android.tools", "desugar_jdk_libs")
    assert not dependency.matches("com.android.tools", "r8")


# --- BuildType ---


def test_build_type_signing_config_from_string():
    build_type = BuildType(name="release", signing_config="debug")
    assert build_type.signing_config is SigningConfigRef.DEBUG


def test_build_type_rejects_unknown_signing_config():
    with pytest.raises(ValidationError):
        BuildType(name="release", signing_config="upload")


# --- BuildConfiguration ---


def test_build_configuration_defaults():
    record = BuildConfiguration()
    assert record.plugins == []
    assert record.desugaring_enabled is False
    assert record.multidex_enabled is False
    assert record.min_sdk is None
    assert record.is_resolved


def test_build_configuration_is_frozen():
    record = BuildConfiguration(min_sdk=21)
    with pytest.raises(ValidationError):
        record.min_sdk = 16


def test_build_configuration_rejects_unknown_fields():
    with pytest.raises(ValidationError):
        BuildConfiguration(minSdk=21)


def test_build_configuration_coerces_reference_strings():
    record = BuildConfiguration(
        compile_sdk="flutter.compileSdkVersion",
        version_name="flutter.versionName",
        min_sdk=21,
    )
    assert record.compile_sdk == PropertyReference(expression="flutter.compileSdkVersion")
    assert set(record.references()) == {"compile_sdk", "version_name"}
    assert not record.is_resolved


def test_build_configuration_integer_fields_from_strings():
    record = BuildConfiguration(min_sdk="21", version_name=2)
    assert record.min_sdk == 21
    assert record.version_name == "2"


@pytest.mark.parametrize("value", [True, "twenty-one"])
def test_build_configuration_rejects_invalid_sdk(value):
    with pytest.raises(ValidationError):
        BuildConfiguration(min_sdk=value)


def test_build_configuration_dedupes_plugins():
    record = BuildConfiguration(
        plugins=["com.android.application", "kotlin-android", "com.android.application"]
    )
    assert record.plugins == ["com.android.application", "kotlin-android"]


def test_build_configuration_lookups():
    record = BuildConfiguration(
        plugins=["com.android.application"],
        build_types=[{"name": "release", "signing_config": "release"}],
        signing_configs=["release"],
        dependencies=[
            {"configuration": "implementation", "group": "androidx.multidex", "name": "multidex", "version": "2.0.1"}
        ],
    )
    assert record.has_plugin("com.android.application")
    assert record.build_type("release").signing_config is SigningConfigRef.RELEASE
    assert record.build_type("profile") is None
    assert record.has_dependency("androidx.multidex", "multidex")
    assert not record.has_dependency("androidx.multidex", "multidex", configuration="api")
    assert record.declared_signing_configs == ["debug", "release"]


def test_build_configuration_to_dict_writes_references_as_expressions():
    record = BuildConfiguration(
        target_sdk="flutter.targetSdkVersion",
        min_sdk=21,
        source_file=Path("android/app/build.gradle.kts"),
    )
    data = record.to_dict()
    assert data["target_sdk"] == "flutter.targetSdkVersion"
    assert data["min_sdk"] == 21
    assert "source_file" not in data
    assert BuildConfiguration(**data).to_dict() == data


@pytest.mark.parametrize(
    "value, expected",
    [
        (11, "11"),
        ("11", "11"),
        ("VERSION_11", "11"),
        ("JavaVersion.VERSION_17", "17"),
        ("JavaVersion.VERSION_1_8", "1.8"),
        ("1.8", "1.8"),
    ],
)
def test_java_version_string(value, expected):
    assert java_version_string(value) == expected


def test_java_version_string_invalid():
    with pytest.raises(ValueError):
        java_version_string("VERSION_ELEVEN")


# --- Enums ---


@pytest.mark.parametrize(
    "path, expected",
    [
        ("android/app/build.gradle.kts", GradleDsl.KOTLIN),
        ("settings.gradle.kts", GradleDsl.KOTLIN),
        ("android/app/build.gradle", GradleDsl.GROOVY),
    ],
)
def test_gradle_dsl_from_path(path, expected):
    assert GradleDsl.from_path(path) is expected


def test_gradle_dsl_from_path_rejects_other_files():
    with pytest.raises(ValueError):
        GradleDsl.from_path("pubspec.yaml")


def test_output_format_from_string():
    assert OutputFormat.from_string(" KTS ") is OutputFormat.KTS
    with pytest.raises(ValueError):
        OutputFormat.from_string("xml")


def test_severity_rank_orders_errors_first():
    assert Severity.ERROR.rank < Severity.WARNING.rank < Severity.INFO.rank
