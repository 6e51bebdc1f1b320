import json

import pytest
from rich.console import Console

from ..core.enums import GradleDsl, OutputFormat
from ..core.errors import ConfigurationError
from ..core.models import BuildConfiguration
from ..parsers.gradle import GradleScriptParser
from ..validation.validator import validate_configuration
from .factory import WriterFactory
from .json_writer import JsonReportWriter, JsonWriter
from .report_writer import ConsoleReportFormatter
from .script_writer import GroovyScriptWriter, KotlinScriptWriter


@pytest.fixture
def flutter_record(flutter_kts):
    return GradleScriptParser(GradleDsl.KOTLIN).parse(flutter_kts)


def test_kotlin_render_parses_back_to_equal_record(flutter_record):
    rendered = KotlinScriptWriter().render(flutter_record)
    assert GradleScriptParser(GradleDsl.KOTLIN).parse(rendered) == flutter_record


def test_groovy_render_parses_back_to_same_values(flutter_record):
    rendered = GroovyScriptWriter().render(flutter_record)
    reparsed = GradleScriptParser(GradleDsl.GROOVY).parse(rendered)
    assert reparsed.to_dict() == flutter_record.to_dict()


def test_kotlin_render_keeps_references_and_layout(flutter_record):
    rendered = KotlinScriptWriter().render(flutter_record)
    assert 'id("dev.flutter.flutter-gradle-plugin")' in rendered
    assert "compileSdk = flutter.compileSdkVersion" in rendered
    assert "isCoreLibraryDesugaringEnabled = true" in rendered
    assert "jvmTarget = JavaVersion.VERSION_11.toString()" in rendered
    assert 'signingConfig = signingConfigs.getByName("debug")' in rendered
    assert 'coreLibraryDesugaring("com.android.tools:desugar_jdk_libs:2.1.4")' in rendered
    assert rendered.endswith("}\n")


def test_groovy_render_uses_groovy_names():
    record = BuildConfiguration(
        plugins=["com.android.application"],
        source_compatibility="1.8",
        desugaring_enabled=True,
        build_types=[{"name": "release", "signing_config": "debug", "minify_enabled": True}],
        dependencies=[{"configuration": "implementation", "group": "androidx.multidex",
                       "name": "multidex", "version": "2.0.1"}],
    )
    rendered = GroovyScriptWriter().render(record)
    assert 'id "com.android.application"' in rendered
    assert "sourceCompatibility = JavaVersion.VERSION_1_8" in rendered
    assert "coreLibraryDesugaringEnabled = true" in rendered
    assert "signingConfig = signingConfigs.debug" in rendered
    assert "minifyEnabled = true" in rendered
    assert 'implementation "androidx.multidex:multidex:2.0.1"' in rendered


def test_render_omits_unset_sections():
    rendered = KotlinScriptWriter().render(BuildConfiguration(namespace="com.example.app"))
    assert rendered == 'android {\n    namespace = "com.example.app"\n}\n'


def test_render_escapes_strings():
    record = BuildConfiguration(version_name='1.0 "beta" $build')
    rendered = KotlinScriptWriter().render(record)
    assert 'versionName = "1.0 \\"beta\\" \\$build"' in rendered
    assert GradleScriptParser().parse(rendered).version_name == '1.0 "beta" $build'


def test_named_build_types_and_signing_configs_round_trip():
    record = BuildConfiguration(
        signing_configs=["release"],
        build_types=[
            {"name": "release", "signing_config": "release", "minify_enabled": True, "shrink_resources": True},
            {"name": "profile", "debuggable": False},
        ],
    )
    rendered = KotlinScriptWriter().render(record)
    assert 'create("release") {' in rendered
    assert 'create("profile") {' in rendered
    assert GradleScriptParser().parse(rendered).to_dict() == record.to_dict()


def test_json_writer_output_loads_back(flutter_record):
    data = json.loads(JsonWriter().render(flutter_record))
    assert data["compile_sdk"] == "flutter.compileSdkVersion"
    assert data["min_sdk"] == 21
    assert BuildConfiguration(**data).to_dict() == flutter_record.to_dict()


def test_writer_write_to_file(tmp_path, flutter_record):
    output = tmp_path / "build.gradle.kts"
    KotlinScriptWriter().write(flutter_record, output)
    assert GradleScriptParser().parse_file(output).to_dict() == flutter_record.to_dict()


@pytest.mark.parametrize("writer", [KotlinScriptWriter(), GroovyScriptWriter(), JsonWriter()])
def test_writer_write_into_missing_directory(tmp_path, flutter_record, writer):
    output = tmp_path / "missing" / "out"
    with pytest.raises(ConfigurationError, match="Error in write"):
        writer.write(flutter_record, output)


def test_json_report_writer_write_into_missing_directory(tmp_path):
    report = validate_configuration(BuildConfiguration(min_sdk=21))
    with pytest.raises(ConfigurationError) as exc_info:
        JsonReportWriter().write_report(report, tmp_path / "missing" / "report.json")
    assert isinstance(exc_info.value.__cause__, FileNotFoundError)


def test_json_report_writer():
    report = validate_configuration(BuildConfiguration(min_sdk=16, desugaring_enabled=True))
    data = json.loads(JsonReportWriter().render_report(report))
    assert data["accepted"] is False
    assert "desugaring-min-sdk" in {issue["rule"] for issue in data["issues"]}


def test_console_report_formatter():
    console = Console(record=True, width=200)
    report = validate_configuration(BuildConfiguration(min_sdk=16, desugaring_enabled=True))
    ConsoleReportFormatter(console).print_report(report)
    text = console.export_text()
    assert "desugaring-min-sdk" in text
    assert "Configuration rejected" in text


@pytest.mark.parametrize(
    "output_format, writer_type",
    [
        (OutputFormat.KTS, KotlinScriptWriter),
        ("groovy", GroovyScriptWriter),
        ("json", JsonWriter),
    ],
)
def test_writer_factory(output_format, writer_type):
    assert isinstance(WriterFactory.create_writer(output_format), writer_type)


@pytest.mark.parametrize(
    "path, expected",
    [
        ("out/build.gradle.kts", OutputFormat.KTS),
        ("out/build.gradle", OutputFormat.GROOVY),
        ("record.json", OutputFormat.JSON),
    ],
)
def test_writer_factory_format_for_path(path, expected):
    assert WriterFactory.format_for_path(path) is expected


def test_writer_factory_rejects_unknown_format():
    with pytest.raises(ValueError):
        WriterFactory.create_writer("xml")
